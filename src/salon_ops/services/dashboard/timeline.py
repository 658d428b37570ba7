"""Per-stylist schedule for the two hours ahead."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from ...data.dashboard_repository import DashboardStore
from ...models.domain import Appointment
from ...schemas.dashboard import StylistSchedule, TimelineAppointment
from .timeutils import clock_label

WINDOW = timedelta(hours=2)


async def collect_timeline(
    store: DashboardStore, tenant_id: str, branch_id: str, day: date, now: datetime
) -> list[StylistSchedule]:
    window_start = clock_label(now)
    window_end = clock_label(now + WINDOW)
    if window_end < window_start:
        # The window runs past midnight; the day's schedule ends at 23:59.
        window_end = "23:59"

    stylists = await store.list_branch_stylists(tenant_id, branch_id)
    appointments = await store.list_appointments(
        tenant_id,
        branch_id,
        day,
        exclude_statuses=("cancelled", "no_show"),
        stylist_ids=[stylist.id for stylist in stylists],
    )
    in_window = [apt for apt in appointments if overlaps_window(apt, window_start, window_end)]

    return [
        StylistSchedule(
            stylistId=stylist.id,
            stylistName=stylist.name,
            avatar=stylist.avatar_url,
            appointments=[
                TimelineAppointment(
                    id=apt.id,
                    startTime=apt.scheduled_time,
                    endTime=apt.end_time,
                    customerName=apt.customer_name or "Guest",
                    status=apt.status,
                )
                for apt in in_window
                if apt.stylist_id == stylist.id
            ],
        )
        for stylist in stylists
    ]


def overlaps_window(appointment: Appointment, window_start: str, window_end: str) -> bool:
    starts_inside = window_start <= appointment.scheduled_time <= window_end
    ends_inside = window_start <= appointment.end_time <= window_end
    spans_window = appointment.scheduled_time <= window_start and appointment.end_time >= window_end
    return starts_inside or ends_inside or spans_window
