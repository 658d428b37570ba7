"""Dashboard aggregators.

Each aggregator captures ``now`` once and hands the same instant to every
collector, so all time-derived fields of one response agree with each other.
Collectors run concurrently; the first failure aborts the aggregation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...data.dashboard_repository import DashboardStore
from ...schemas.dashboard import CommandCenterResponse, OwnerDashboardResponse
from .attention import collect_attention_items
from .next_up import collect_next_up
from .owner import collect_owner_dashboard
from .quick_stats import collect_quick_stats
from .stations import collect_stations
from .timeline import collect_timeline

logger = logging.getLogger(__name__)


def current_time() -> datetime:
    """Wall-clock time in the configured branch timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


async def get_command_center(
    store: DashboardStore,
    tenant_id: str,
    branch_id: str,
    target_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> CommandCenterResponse:
    now = now or current_time()
    day = target_date or now.date()
    logger.debug(f"Command center tenant={tenant_id} branch={branch_id} day={day} now={now.isoformat()}")

    stats, stations, next_up, attention_items, timeline = await asyncio.gather(
        collect_quick_stats(store, tenant_id, branch_id, day),
        collect_stations(store, tenant_id, branch_id, day, now),
        collect_next_up(store, tenant_id, branch_id, day, now),
        collect_attention_items(store, tenant_id, branch_id, day, now),
        collect_timeline(store, tenant_id, branch_id, day, now),
    )

    return CommandCenterResponse(
        stats=stats,
        stations=stations,
        nextUp=next_up,
        attentionItems=attention_items,
        timeline=timeline,
    )


async def get_owner_dashboard(
    store: DashboardStore,
    tenant_id: str,
    branch_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OwnerDashboardResponse:
    now = now or current_time()
    return await collect_owner_dashboard(store, tenant_id, branch_id, now.date())
