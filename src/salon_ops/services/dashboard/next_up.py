"""Next-up queue: the soonest appointments and the live walk-in queue."""

from __future__ import annotations

from datetime import date, datetime

from ...data.dashboard_repository import DashboardStore
from ...schemas.dashboard import NextUp, UpcomingAppointment, WalkInEntry
from .timeutils import at_time, clock_label, minutes_between

UPCOMING_STATUSES = ("booked", "confirmed", "checked_in")
QUEUE_STATUSES = ("waiting", "called", "serving")
UPCOMING_LIMIT = 5


async def collect_next_up(
    store: DashboardStore, tenant_id: str, branch_id: str, day: date, now: datetime
) -> NextUp:
    current_time = clock_label(now)

    candidates = await store.list_appointments(tenant_id, branch_id, day, statuses=UPCOMING_STATUSES)
    upcoming = sorted(
        (apt for apt in candidates if apt.scheduled_time >= current_time),
        key=lambda apt: apt.scheduled_time,
    )[:UPCOMING_LIMIT]

    stylist_ids = [apt.stylist_id for apt in upcoming if apt.stylist_id]
    stylist_names = await store.get_stylist_names(tenant_id, stylist_ids) if stylist_ids else {}

    appointments = [
        UpcomingAppointment(
            id=apt.id,
            customerName=apt.customer_name or "Guest",
            customerPhone=apt.customer_phone or "",
            scheduledTime=apt.scheduled_time,
            services=[name or "Service" for name in apt.service_names],
            stylistName=(stylist_names.get(apt.stylist_id) or "Any") if apt.stylist_id else "Any",
            status=apt.status,
            # Only unactioned bookings count as late here.
            isLate=apt.status == "booked" and now > at_time(day, apt.scheduled_time, now.tzinfo),
        )
        for apt in upcoming
    ]

    queue = sorted(
        await store.list_walk_ins(tenant_id, branch_id, day, statuses=QUEUE_STATUSES),
        key=lambda entry: entry.token_number,
    )
    service_ids = list(dict.fromkeys(sid for entry in queue for sid in entry.service_ids))
    service_names = await store.get_service_names(tenant_id, service_ids) if service_ids else {}

    walk_ins = [
        WalkInEntry(
            id=entry.id,
            tokenNumber=entry.token_number,
            customerName=entry.customer_name or "Guest",
            services=[service_names.get(sid) or "Service" for sid in entry.service_ids],
            waitTime=minutes_between(now, entry.created_at),
            status=entry.status,
        )
        for entry in queue
    ]

    return NextUp(appointments=appointments, walkIns=walk_ins)
