"""Station (chair) view: what each stylist of the branch is doing right now."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from ...data.dashboard_repository import DashboardStore
from ...models.domain import Appointment, Stylist, StylistBreak
from ...schemas.dashboard import CurrentAppointment, Station
from .timeutils import at_time, clock_label, minutes_between, round_half_up

ACTIVE_STATUSES = frozenset({"in_progress", "checked_in"})


async def collect_stations(
    store: DashboardStore, tenant_id: str, branch_id: str, day: date, now: datetime
) -> list[Station]:
    stylists = await store.list_branch_stylists(tenant_id, branch_id)
    stylist_ids = [stylist.id for stylist in stylists]

    appointments = await store.list_appointments(
        tenant_id,
        branch_id,
        day,
        exclude_statuses=("cancelled", "no_show"),
        stylist_ids=stylist_ids,
    )
    breaks = await store.list_active_breaks(tenant_id, stylist_ids)

    return [
        build_station(index, stylist, appointments, breaks, day, now)
        for index, stylist in enumerate(stylists, start=1)
    ]


def build_station(
    position: int,
    stylist: Stylist,
    appointments: Iterable[Appointment],
    breaks: Iterable[StylistBreak],
    day: date,
    now: datetime,
) -> Station:
    """Project one stylist onto a chair; break wins over an ongoing appointment."""
    current_time = clock_label(now)
    weekday = (day.weekday() + 1) % 7

    current = next(
        (
            apt
            for apt in appointments
            if apt.stylist_id == stylist.id
            and apt.status in ACTIVE_STATUSES
            and apt.scheduled_time <= current_time <= apt.end_time
        ),
        None,
    )
    on_break = any(
        brk.stylist_id == stylist.id
        and (brk.day_of_week is None or brk.day_of_week == weekday)
        and brk.start_time <= current_time <= brk.end_time
        for brk in breaks
    )

    status = "available"
    if on_break:
        status = "break"
    elif current is not None:
        status = "occupied"

    return Station(
        id=f"station-{position}",
        name=f"Chair {position}",
        stylistId=stylist.id,
        stylistName=stylist.name,
        stylistAvatar=stylist.avatar_url,
        status=status,
        currentAppointment=_project_appointment(current, day, now) if current else None,
    )


def _project_appointment(appointment: Appointment, day: date, now: datetime) -> CurrentAppointment:
    start = at_time(day, appointment.scheduled_time, now.tzinfo)
    end = at_time(day, appointment.end_time, now.tzinfo)
    total_minutes = minutes_between(end, start)
    elapsed_minutes = minutes_between(now, start)

    if total_minutes > 0:
        progress = min(100.0, max(0.0, elapsed_minutes / total_minutes * 100))
    else:
        progress = 100.0
    time_remaining = max(0, total_minutes - elapsed_minutes)

    return CurrentAppointment(
        id=appointment.id,
        customerName=appointment.customer_name or "Guest",
        serviceName=_first_service(appointment.service_names),
        startTime=appointment.scheduled_time,
        endTime=appointment.end_time,
        progress=int(round_half_up(progress)),
        timeRemaining=time_remaining,
    )


def _first_service(names: list[str]) -> str:
    first: Optional[str] = names[0] if names else None
    return first or "Service"
