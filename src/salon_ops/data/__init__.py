"""Data access for the dashboards."""

from .dashboard_repository import DashboardStore, SupabaseDashboardStore, get_dashboard_store

__all__ = ["DashboardStore", "SupabaseDashboardStore", "get_dashboard_store"]
