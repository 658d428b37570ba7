"""Read access to appointments, queue, billing, inventory and staff rows.

The dashboard collectors only depend on :class:`DashboardStore`. The Supabase
implementation pushes tenant, branch, date and status filters into PostgREST
and leaves time-of-day filtering, ordering and capping to the collectors.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Sequence

from supabase import Client

from ..db.supabase import get_supabase_client
from ..errors import StoreUnavailableError
from ..models.domain import Appointment, Stylist, StylistBreak, WalkIn

logger = logging.getLogger(__name__)

STAFF_ROLES = ("stylist", "receptionist")

# Postgres trims trailing zeros from fractional seconds.
_FRACTION = re.compile(r"(?<=:\d\d)\.(\d+)")


class DashboardStore(ABC):
    """Async read queries used by the dashboard collectors."""

    @abstractmethod
    async def list_branch_stylists(self, tenant_id: str, branch_id: str) -> list[Stylist]:
        """Active stylists assigned to the branch, ordered by name then id."""

    @abstractmethod
    async def get_stylist_names(self, tenant_id: str, stylist_ids: Sequence[str]) -> dict[str, str]:
        ...

    @abstractmethod
    async def list_appointments(
        self,
        tenant_id: str,
        branch_id: str | None,
        day: date,
        *,
        statuses: Sequence[str] | None = None,
        exclude_statuses: Sequence[str] | None = None,
        stylist_ids: Sequence[str] | None = None,
    ) -> list[Appointment]:
        """Non-deleted appointments of one day; ``branch_id=None`` means tenant-wide."""

    @abstractmethod
    async def list_walk_ins(
        self,
        tenant_id: str,
        branch_id: str,
        day: date,
        *,
        statuses: Sequence[str] | None = None,
    ) -> list[WalkIn]:
        ...

    @abstractmethod
    async def list_active_breaks(self, tenant_id: str, stylist_ids: Sequence[str]) -> list[StylistBreak]:
        ...

    @abstractmethod
    async def get_service_names(self, tenant_id: str, service_ids: Sequence[str]) -> dict[str, str]:
        ...

    @abstractmethod
    async def sum_finalized_invoices(self, tenant_id: str, branch_id: str | None, day: date) -> float:
        """Grand total of finalized invoices dated on ``day``."""

    @abstractmethod
    async def count_low_stock_products(self, tenant_id: str, branch_id: str | None) -> int:
        ...

    @abstractmethod
    async def count_expiring_batches(
        self, tenant_id: str, branch_id: str | None, start: date, end: date
    ) -> int:
        ...

    @abstractmethod
    async def count_present_staff(self, tenant_id: str, branch_id: str | None, day: date) -> int:
        ...

    @abstractmethod
    async def count_active_staff(self, tenant_id: str, branch_id: str | None) -> int:
        ...

    @abstractmethod
    async def count_staff_on_leave(self, tenant_id: str, branch_id: str | None, day: date) -> int:
        ...


class SupabaseDashboardStore(DashboardStore):
    """:class:`DashboardStore` backed by the synchronous supabase-py client.

    Every query runs in a worker thread so concurrent collectors overlap.
    """

    def __init__(self, client: Client) -> None:
        self._client = client

    async def _execute(self, query: Any, label: str) -> Any:
        try:
            return await asyncio.to_thread(query.execute)
        except Exception as exc:
            logger.warning(f"Dashboard query '{label}' failed: {exc}")
            raise

    async def list_branch_stylists(self, tenant_id: str, branch_id: str) -> list[Stylist]:
        query = (
            self._client.table("users")
            .select("id,name,avatar_url,user_branches!inner(branch_id)")
            .eq("tenant_id", tenant_id)
            .eq("role", "stylist")
            .eq("is_active", True)
            .is_("deleted_at", "null")
            .eq("user_branches.branch_id", branch_id)
            .order("name")
            .order("id")
        )
        response = await self._execute(query, "branch_stylists")
        return [
            Stylist(id=str(row["id"]), name=row.get("name") or "", avatar_url=row.get("avatar_url"))
            for row in response.data or []
        ]

    async def get_stylist_names(self, tenant_id: str, stylist_ids: Sequence[str]) -> dict[str, str]:
        if not stylist_ids:
            return {}
        query = (
            self._client.table("users")
            .select("id,name")
            .eq("tenant_id", tenant_id)
            .in_("id", list(dict.fromkeys(stylist_ids)))
        )
        response = await self._execute(query, "stylist_names")
        return {str(row["id"]): row.get("name") or "" for row in response.data or []}

    async def list_appointments(
        self,
        tenant_id: str,
        branch_id: str | None,
        day: date,
        *,
        statuses: Sequence[str] | None = None,
        exclude_statuses: Sequence[str] | None = None,
        stylist_ids: Sequence[str] | None = None,
    ) -> list[Appointment]:
        if stylist_ids is not None and not stylist_ids:
            return []
        query = (
            self._client.table("appointments")
            .select(
                "id,stylist_id,scheduled_date,scheduled_time,end_time,status,"
                "customers(name,phone),appointment_services(services(name))"
            )
            .eq("tenant_id", tenant_id)
            .eq("scheduled_date", day.isoformat())
            .is_("deleted_at", "null")
        )
        if branch_id:
            query = query.eq("branch_id", branch_id)
        if statuses:
            query = query.in_("status", list(statuses))
        if exclude_statuses:
            query = query.not_.in_("status", list(exclude_statuses))
        if stylist_ids:
            query = query.in_("stylist_id", list(stylist_ids))
        response = await self._execute(query, "appointments")
        return [_appointment_from_row(row) for row in response.data or []]

    async def list_walk_ins(
        self,
        tenant_id: str,
        branch_id: str,
        day: date,
        *,
        statuses: Sequence[str] | None = None,
    ) -> list[WalkIn]:
        query = (
            self._client.table("walk_in_queue")
            .select(
                "id,token_number,customer_id,customer_name,service_ids,status,"
                "estimated_wait_minutes,created_at"
            )
            .eq("tenant_id", tenant_id)
            .eq("branch_id", branch_id)
            .eq("queue_date", day.isoformat())
        )
        if statuses:
            query = query.in_("status", list(statuses))
        response = await self._execute(query, "walk_ins")
        return [_walk_in_from_row(row) for row in response.data or []]

    async def list_active_breaks(self, tenant_id: str, stylist_ids: Sequence[str]) -> list[StylistBreak]:
        if not stylist_ids:
            return []
        query = (
            self._client.table("stylist_breaks")
            .select("stylist_id,start_time,end_time,day_of_week")
            .eq("tenant_id", tenant_id)
            .eq("is_active", True)
            .in_("stylist_id", list(stylist_ids))
        )
        response = await self._execute(query, "stylist_breaks")
        return [
            StylistBreak(
                stylist_id=str(row["stylist_id"]),
                start_time=row["start_time"],
                end_time=row["end_time"],
                day_of_week=row.get("day_of_week"),
            )
            for row in response.data or []
        ]

    async def get_service_names(self, tenant_id: str, service_ids: Sequence[str]) -> dict[str, str]:
        if not service_ids:
            return {}
        query = (
            self._client.table("services")
            .select("id,name")
            .eq("tenant_id", tenant_id)
            .in_("id", list(dict.fromkeys(service_ids)))
        )
        response = await self._execute(query, "service_names")
        return {str(row["id"]): row.get("name") or "" for row in response.data or []}

    async def sum_finalized_invoices(self, tenant_id: str, branch_id: str | None, day: date) -> float:
        query = (
            self._client.table("invoices")
            .select("grand_total")
            .eq("tenant_id", tenant_id)
            .eq("status", "finalized")
            .gte("invoice_date", day.isoformat())
            .lt("invoice_date", (day + timedelta(days=1)).isoformat())
        )
        if branch_id:
            query = query.eq("branch_id", branch_id)
        response = await self._execute(query, "finalized_invoices")
        return sum(float(row.get("grand_total") or 0) for row in response.data or [])

    async def count_low_stock_products(self, tenant_id: str, branch_id: str | None) -> int:
        settings_query = (
            self._client.table("branch_product_settings")
            .select("branch_id,product_id,reorder_level,products!inner(is_active,deleted_at)")
            .eq("tenant_id", tenant_id)
            .eq("is_enabled", True)
            .not_.is_("reorder_level", "null")
            .eq("products.is_active", True)
            .is_("products.deleted_at", "null")
        )
        stock_query = (
            self._client.table("stock_batches")
            .select("branch_id,product_id,available_quantity")
            .eq("tenant_id", tenant_id)
            .eq("is_depleted", False)
        )
        if branch_id:
            settings_query = settings_query.eq("branch_id", branch_id)
            stock_query = stock_query.eq("branch_id", branch_id)
        settings_response, stock_response = await asyncio.gather(
            self._execute(settings_query, "reorder_levels"),
            self._execute(stock_query, "stock_levels"),
        )
        return _count_below_reorder_level(settings_response.data or [], stock_response.data or [])

    async def count_expiring_batches(
        self, tenant_id: str, branch_id: str | None, start: date, end: date
    ) -> int:
        query = (
            self._client.table("stock_batches")
            .select("id", count="exact")
            .eq("tenant_id", tenant_id)
            .eq("is_depleted", False)
            .gt("available_quantity", 0)
            .gte("expiry_date", start.isoformat())
            .lte("expiry_date", end.isoformat())
        )
        if branch_id:
            query = query.eq("branch_id", branch_id)
        response = await self._execute(query, "expiring_batches")
        return response.count or 0

    async def count_present_staff(self, tenant_id: str, branch_id: str | None, day: date) -> int:
        query = (
            self._client.table("attendance")
            .select("id", count="exact")
            .eq("tenant_id", tenant_id)
            .eq("attendance_date", day.isoformat())
            .not_.is_("check_in_time", "null")
            .eq("status", "present")
        )
        if branch_id:
            query = query.eq("branch_id", branch_id)
        response = await self._execute(query, "present_staff")
        return response.count or 0

    async def count_active_staff(self, tenant_id: str, branch_id: str | None) -> int:
        columns = "id,user_branches!inner(branch_id)" if branch_id else "id"
        query = (
            self._client.table("users")
            .select(columns, count="exact")
            .eq("tenant_id", tenant_id)
            .eq("is_active", True)
            .is_("deleted_at", "null")
            .in_("role", list(STAFF_ROLES))
        )
        if branch_id:
            query = query.eq("user_branches.branch_id", branch_id)
        response = await self._execute(query, "active_staff")
        return response.count or 0

    async def count_staff_on_leave(self, tenant_id: str, branch_id: str | None, day: date) -> int:
        query = (
            self._client.table("leaves")
            .select("id", count="exact")
            .eq("tenant_id", tenant_id)
            .eq("status", "approved")
            .lte("start_date", day.isoformat())
            .gte("end_date", day.isoformat())
        )
        if branch_id:
            query = query.eq("branch_id", branch_id)
        response = await self._execute(query, "staff_on_leave")
        return response.count or 0


def get_dashboard_store() -> DashboardStore:
    """FastAPI dependency returning the configured store."""
    client = get_supabase_client()
    if client is None:
        raise StoreUnavailableError(
            "Database not configured. Set SALON_SUPABASE_URL and SALON_SUPABASE_KEY environment variables."
        )
    return SupabaseDashboardStore(client)


def _appointment_from_row(row: dict[str, Any]) -> Appointment:
    customer = row.get("customers") or {}
    service_names: list[str] = []
    for item in row.get("appointment_services") or []:
        service = (item or {}).get("services") or {}
        service_names.append(service.get("name") or "Service")
    return Appointment(
        id=str(row["id"]),
        stylist_id=str(row["stylist_id"]) if row.get("stylist_id") else None,
        scheduled_date=date.fromisoformat(str(row["scheduled_date"])[:10]),
        scheduled_time=str(row["scheduled_time"])[:5],
        end_time=str(row["end_time"])[:5],
        status=row["status"],
        customer_name=customer.get("name"),
        customer_phone=customer.get("phone"),
        service_names=service_names,
    )


def _walk_in_from_row(row: dict[str, Any]) -> WalkIn:
    return WalkIn(
        id=str(row["id"]),
        token_number=int(row["token_number"]),
        status=row["status"],
        created_at=_parse_timestamp(row["created_at"]),
        customer_id=str(row["customer_id"]) if row.get("customer_id") else None,
        customer_name=row.get("customer_name"),
        service_ids=[str(sid) for sid in row.get("service_ids") or []],
        estimated_wait_minutes=row.get("estimated_wait_minutes"),
    )


def _parse_timestamp(value: Any) -> datetime:
    """Parse a PostgREST timestamp; naive values are stored as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).replace("Z", "+00:00")
        text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _count_below_reorder_level(
    settings_rows: Iterable[dict[str, Any]], stock_rows: Iterable[dict[str, Any]]
) -> int:
    available: dict[tuple[str, str], int] = defaultdict(int)
    for row in stock_rows:
        available[(str(row["branch_id"]), str(row["product_id"]))] += int(row.get("available_quantity") or 0)

    count = 0
    for row in settings_rows:
        reorder_level = row.get("reorder_level")
        if reorder_level is None:
            continue
        key = (str(row["branch_id"]), str(row["product_id"]))
        if available.get(key, 0) < int(reorder_level):
            count += 1
    return count
