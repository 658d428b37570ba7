"""Dashboard aggregation services."""

from .attention import collect_attention_items
from .next_up import collect_next_up
from .owner import collect_owner_dashboard, summarize_appointments
from .quick_stats import collect_quick_stats
from .service import current_time, get_command_center, get_owner_dashboard
from .stations import collect_stations
from .timeline import collect_timeline

__all__ = [
    "get_command_center",
    "get_owner_dashboard",
    "current_time",
    "collect_quick_stats",
    "collect_stations",
    "collect_next_up",
    "collect_attention_items",
    "collect_timeline",
    "collect_owner_dashboard",
    "summarize_appointments",
]
