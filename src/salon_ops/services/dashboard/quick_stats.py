"""Revenue, appointment and walk-in counters for one branch day."""

from __future__ import annotations

from datetime import date, timedelta

from ...data.dashboard_repository import DashboardStore
from ...schemas.dashboard import QuickStats
from .timeutils import percent_change, round_half_up

REMAINING_STATUSES = frozenset({"booked", "confirmed", "checked_in", "in_progress"})

# 8 working hours of 15-minute slots.
TOTAL_SLOTS = 8 * 4


async def collect_quick_stats(
    store: DashboardStore, tenant_id: str, branch_id: str, day: date
) -> QuickStats:
    today_revenue = await store.sum_finalized_invoices(tenant_id, branch_id, day)
    yesterday_revenue = await store.sum_finalized_invoices(tenant_id, branch_id, day - timedelta(days=1))
    revenue_change = percent_change(today_revenue, yesterday_revenue)

    appointments = await store.list_appointments(
        tenant_id, branch_id, day, exclude_statuses=("cancelled",)
    )
    completed = sum(1 for apt in appointments if apt.status == "completed")
    remaining = sum(1 for apt in appointments if apt.status in REMAINING_STATUSES)
    no_shows = sum(1 for apt in appointments if apt.status == "no_show")

    walk_ins = await store.list_walk_ins(tenant_id, branch_id, day)
    served = sum(1 for entry in walk_ins if entry.status == "completed")
    average_wait = 0.0
    if walk_ins:
        average_wait = sum(entry.estimated_wait_minutes or 0 for entry in walk_ins) / len(walk_ins)

    occupancy = len(appointments) / TOTAL_SLOTS * 100

    return QuickStats(
        todayRevenue=today_revenue,
        revenueChange=round_half_up(revenue_change, 1),
        appointmentsCompleted=completed,
        appointmentsRemaining=remaining,
        walkInsServed=served,
        averageWaitTime=int(round_half_up(average_wait)),
        noShows=no_shows,
        occupancyRate=int(round_half_up(occupancy)),
    )
