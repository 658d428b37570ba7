"""Domain models for the rows the dashboards read."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class Stylist:
    """An active stylist assigned to a branch."""

    id: str
    name: str
    avatar_url: Optional[str] = None


@dataclass(slots=True)
class Appointment:
    """A booked appointment with its customer and service names already joined."""

    id: str
    scheduled_date: date
    scheduled_time: str
    end_time: str
    status: str
    stylist_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    service_names: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WalkIn:
    """An entry of a branch's walk-in queue."""

    id: str
    token_number: int
    status: str
    created_at: datetime
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    service_ids: list[str] = field(default_factory=list)
    estimated_wait_minutes: Optional[int] = None


@dataclass(slots=True)
class StylistBreak:
    """A recurring break; ``day_of_week`` is 0 for Sunday, ``None`` for every day."""

    stylist_id: str
    start_time: str
    end_time: str
    day_of_week: Optional[int] = None
