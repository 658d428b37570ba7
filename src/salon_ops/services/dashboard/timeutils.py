"""Time-of-day and rounding helpers shared by the dashboard collectors."""

from __future__ import annotations

import math
from datetime import date, datetime, time, tzinfo
from typing import Optional


def clock_label(moment: datetime) -> str:
    """``HH:MM`` wall-clock label, comparable with stored appointment times."""
    return moment.strftime("%H:%M")


def at_time(day: date, label: str, tz: Optional[tzinfo] = None) -> datetime:
    hours, minutes = label.split(":")[:2]
    return datetime.combine(day, time(int(hours), int(minutes)), tzinfo=tz)


def minutes_between(later: datetime, earlier: datetime) -> int:
    """Whole minutes from ``earlier`` to ``later``, truncated toward zero."""
    return int((later - earlier).total_seconds() / 60)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent_change(current: float, baseline: float) -> float:
    # A zero baseline reports no change rather than an infinite one.
    if baseline <= 0:
        return 0.0
    return (current - baseline) / baseline * 100
