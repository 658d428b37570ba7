"""Owner dashboard: revenue, appointment, inventory and staff summary."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ...config import settings
from ...data.dashboard_repository import DashboardStore
from ...models.domain import Appointment
from ...schemas.dashboard import (
    AppointmentSummary,
    InventorySummary,
    OwnerDashboardResponse,
    RevenueSummary,
    StaffSummary,
)
from .timeutils import percent_change, round_half_up

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = frozenset({"booked", "confirmed", "checked_in"})


async def collect_owner_dashboard(
    store: DashboardStore,
    tenant_id: str,
    branch_id: Optional[str],
    today: date,
    expiry_days: Optional[int] = None,
) -> OwnerDashboardResponse:
    """Run the nine owner reads concurrently and fold them into one response.

    ``branch_id=None`` aggregates the whole tenant. The first failing read
    aborts the whole dashboard.
    """
    if expiry_days is None:
        expiry_days = settings.expiry_alert_days
    expiry_horizon = today + timedelta(days=expiry_days)
    logger.debug(f"Owner dashboard tenant={tenant_id} branch={branch_id or '*'} day={today}")

    (
        today_revenue,
        yesterday_revenue,
        last_week_revenue,
        appointments,
        low_stock,
        expiring,
        present,
        active,
        on_leave,
    ) = await asyncio.gather(
        store.sum_finalized_invoices(tenant_id, branch_id, today),
        store.sum_finalized_invoices(tenant_id, branch_id, today - timedelta(days=1)),
        store.sum_finalized_invoices(tenant_id, branch_id, today - timedelta(days=7)),
        store.list_appointments(tenant_id, branch_id, today),
        store.count_low_stock_products(tenant_id, branch_id),
        store.count_expiring_batches(tenant_id, branch_id, today, expiry_horizon),
        store.count_present_staff(tenant_id, branch_id, today),
        store.count_active_staff(tenant_id, branch_id),
        store.count_staff_on_leave(tenant_id, branch_id, today),
    )

    return OwnerDashboardResponse(
        revenue=RevenueSummary(
            today=round_half_up(today_revenue, 2),
            yesterday=round_half_up(yesterday_revenue, 2),
            lastWeekSameDay=round_half_up(last_week_revenue, 2),
            percentChangeVsYesterday=round_half_up(percent_change(today_revenue, yesterday_revenue), 1),
            percentChangeVsLastWeek=round_half_up(percent_change(today_revenue, last_week_revenue), 1),
        ),
        appointments=summarize_appointments(appointments),
        inventory=InventorySummary(lowStockCount=low_stock, expiringCount=expiring),
        staff=StaffSummary(presentToday=present, totalActive=active, onLeave=on_leave),
    )


def summarize_appointments(appointments: Iterable[Appointment]) -> AppointmentSummary:
    statuses = [apt.status for apt in appointments]
    return AppointmentSummary(
        total=len(statuses),
        completed=statuses.count("completed"),
        cancelled=statuses.count("cancelled"),
        noShows=statuses.count("no_show"),
        inProgress=statuses.count("in_progress"),
        upcoming=sum(1 for status in statuses if status in UPCOMING_STATUSES),
    )
