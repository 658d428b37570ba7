"""Route group exports."""

from . import dashboard, health

__all__ = ["dashboard", "health"]
