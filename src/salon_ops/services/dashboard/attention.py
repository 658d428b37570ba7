"""Attention items: a triage list the front desk should act on.

Items are synthesised on every request and never stored. Ids are derived from
the underlying row (``late-<appointment>``, ``checkout-<appointment>``,
``walkin-<queue entry>``) so the same state always yields the same id.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...config import settings
from ...data.dashboard_repository import DashboardStore
from ...schemas.dashboard import AttentionItem
from .timeutils import at_time, clock_label, minutes_between

LATE_AFTER_MINUTES = 10
VERY_LATE_MINUTES = 30
LONG_WAIT_MINUTES = 20
VERY_LONG_WAIT_MINUTES = 40
MAX_ITEMS = 10

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


async def collect_attention_items(
    store: DashboardStore,
    tenant_id: str,
    branch_id: str,
    day: date,
    now: datetime,
    candidate_cap: Optional[int] = None,
) -> list[AttentionItem]:
    cap = settings.attention_candidate_cap if candidate_cap is None else candidate_cap
    created_at = now.isoformat()
    current_time = clock_label(now)
    items: list[AttentionItem] = []

    # Earliest scheduled first, so the cap keeps the most overdue bookings.
    booked = await store.list_appointments(tenant_id, branch_id, day, statuses=("booked", "confirmed"))
    late_candidates = sorted(
        (apt for apt in booked if apt.scheduled_time < current_time),
        key=lambda apt: (apt.scheduled_time, apt.id),
    )[:cap]
    for apt in late_candidates:
        late_minutes = minutes_between(now, at_time(day, apt.scheduled_time, now.tzinfo))
        if late_minutes < LATE_AFTER_MINUTES:
            continue
        items.append(
            AttentionItem(
                id=f"late-{apt.id}",
                type="late_arrival",
                priority="high" if late_minutes >= VERY_LATE_MINUTES else "medium",
                title=f"{apt.customer_name or 'Customer'} is late",
                description=f"{late_minutes} minutes past scheduled time ({apt.scheduled_time})",
                entityType="appointment",
                entityId=apt.id,
                createdAt=created_at,
            )
        )

    # TODO: skip appointments that already have an invoice once invoices carry appointment_id.
    completed = await store.list_appointments(tenant_id, branch_id, day, statuses=("completed",))
    for apt in sorted(completed, key=lambda apt: (apt.scheduled_time, apt.id))[:cap]:
        items.append(
            AttentionItem(
                id=f"checkout-{apt.id}",
                type="pending_checkout",
                priority="high",
                title=f"Pending checkout: {apt.customer_name or 'Customer'}",
                description="Service completed but not billed",
                entityType="appointment",
                entityId=apt.id,
                createdAt=created_at,
            )
        )

    waiting = await store.list_walk_ins(tenant_id, branch_id, day, statuses=("waiting",))
    for entry in waiting:
        wait_minutes = minutes_between(now, entry.created_at)
        if wait_minutes < LONG_WAIT_MINUTES:
            continue
        items.append(
            AttentionItem(
                id=f"walkin-{entry.id}",
                type="walk_in_waiting",
                priority="high" if wait_minutes >= VERY_LONG_WAIT_MINUTES else "medium",
                title=f"Walk-in #{entry.token_number} waiting",
                description=f"{entry.customer_name or 'Customer'} waiting for {wait_minutes} minutes",
                entityType="customer",
                entityId=entry.customer_id or entry.id,
                createdAt=created_at,
            )
        )

    return prioritize(items)


def prioritize(items: list[AttentionItem], limit: int = MAX_ITEMS) -> list[AttentionItem]:
    """Stable sort high -> medium -> low, then keep the first ``limit``."""
    return sorted(items, key=lambda item: PRIORITY_ORDER[item.priority])[:limit]
