"""In-memory stand-ins for the dashboard store and the Supabase client."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Sequence

import jwt

from salon_ops.config import settings
from salon_ops.data.dashboard_repository import DashboardStore
from salon_ops.models.domain import Appointment, Stylist, StylistBreak, WalkIn

TENANT_ID = "tenant-1"
BRANCH_ID = "3f1c1d5e-8a0b-4c6e-9d7a-2b5f0e1a9c44"
OTHER_BRANCH_ID = "9b2e4f60-1d3c-4a8b-b7e5-6c0f2a1d3e55"
# A Tuesday
DAY = date(2026, 3, 10)


def at(hhmm: str, day: date = DAY) -> datetime:
    hours, minutes = hhmm.split(":")
    return datetime(day.year, day.month, day.day, int(hours), int(minutes))


def appointment(
    apt_id: str,
    start: str,
    end: str,
    status: str = "booked",
    stylist_id: str | None = "s1",
    customer: str | None = "Asha",
    services: Sequence[str] = ("Haircut",),
    day: date = DAY,
) -> Appointment:
    return Appointment(
        id=apt_id,
        scheduled_date=day,
        scheduled_time=start,
        end_time=end,
        status=status,
        stylist_id=stylist_id,
        customer_name=customer,
        customer_phone="+911234567890" if customer else None,
        service_names=list(services),
    )


def walk_in(
    entry_id: str,
    token: int,
    created_at: datetime,
    status: str = "waiting",
    customer: str | None = "Walk-in guest",
    customer_id: str | None = None,
    service_ids: Sequence[str] = (),
    estimated_wait: int | None = None,
) -> WalkIn:
    return WalkIn(
        id=entry_id,
        token_number=token,
        status=status,
        created_at=created_at,
        customer_id=customer_id,
        customer_name=customer,
        service_ids=list(service_ids),
        estimated_wait_minutes=estimated_wait,
    )


class FakeDashboardStore(DashboardStore):
    """Honours the status, stylist and day filters the Supabase store pushes down.

    Walk-ins belong to the queue day of their ``created_at``.
    """

    def __init__(
        self,
        stylists: Sequence[Stylist] = (),
        appointments: Sequence[Appointment] = (),
        walk_ins: Sequence[WalkIn] = (),
        breaks: Sequence[StylistBreak] = (),
        services: dict[str, str] | None = None,
        revenue: dict[date, float] | None = None,
        low_stock: int = 0,
        expiring: int = 0,
        present: int = 0,
        active: int = 0,
        on_leave: int = 0,
        fail_on: Sequence[str] = (),
    ) -> None:
        self.stylists = list(stylists)
        self.appointments = list(appointments)
        self.walk_ins = list(walk_ins)
        self.breaks = list(breaks)
        self.services = dict(services or {})
        self.revenue = dict(revenue or {})
        self.low_stock = low_stock
        self.expiring = expiring
        self.present = present
        self.active = active
        self.on_leave = on_leave
        self.fail_on = set(fail_on)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    async def list_branch_stylists(self, tenant_id, branch_id):
        self._record("list_branch_stylists", tenant_id, branch_id)
        return list(self.stylists)

    async def get_stylist_names(self, tenant_id, stylist_ids):
        self._record("get_stylist_names", tenant_id, tuple(stylist_ids))
        return {s.id: s.name for s in self.stylists if s.id in stylist_ids}

    async def list_appointments(
        self, tenant_id, branch_id, day, *, statuses=None, exclude_statuses=None, stylist_ids=None
    ):
        self._record("list_appointments", tenant_id, branch_id, day)
        rows = [apt for apt in self.appointments if apt.scheduled_date == day]
        if statuses:
            rows = [apt for apt in rows if apt.status in statuses]
        if exclude_statuses:
            rows = [apt for apt in rows if apt.status not in exclude_statuses]
        if stylist_ids is not None:
            rows = [apt for apt in rows if apt.stylist_id in stylist_ids]
        return rows

    async def list_walk_ins(self, tenant_id, branch_id, day, *, statuses=None):
        self._record("list_walk_ins", tenant_id, branch_id, day)
        rows = [entry for entry in self.walk_ins if entry.created_at.date() == day]
        if statuses:
            rows = [entry for entry in rows if entry.status in statuses]
        return rows

    async def list_active_breaks(self, tenant_id, stylist_ids):
        self._record("list_active_breaks", tenant_id, tuple(stylist_ids))
        return [brk for brk in self.breaks if brk.stylist_id in stylist_ids]

    async def get_service_names(self, tenant_id, service_ids):
        self._record("get_service_names", tenant_id, tuple(service_ids))
        return {sid: name for sid, name in self.services.items() if sid in service_ids}

    async def sum_finalized_invoices(self, tenant_id, branch_id, day):
        self._record("sum_finalized_invoices", tenant_id, branch_id, day)
        return self.revenue.get(day, 0.0)

    async def count_low_stock_products(self, tenant_id, branch_id):
        self._record("count_low_stock_products", tenant_id, branch_id)
        return self.low_stock

    async def count_expiring_batches(self, tenant_id, branch_id, start, end):
        self._record("count_expiring_batches", tenant_id, branch_id, start, end)
        return self.expiring

    async def count_present_staff(self, tenant_id, branch_id, day):
        self._record("count_present_staff", tenant_id, branch_id, day)
        return self.present

    async def count_active_staff(self, tenant_id, branch_id):
        self._record("count_active_staff", tenant_id, branch_id)
        return self.active

    async def count_staff_on_leave(self, tenant_id, branch_id, day):
        self._record("count_staff_on_leave", tenant_id, branch_id, day)
        return self.on_leave


class FakeQuery:
    """Mimics the chained PostgREST query builder and records every filter call."""

    def __init__(self, table: str, data: list[dict] | None = None, count: int | None = None) -> None:
        self.table = table
        self.data = data or []
        self.count = count
        self.calls: list[tuple] = []

    def __getattr__(self, name: str):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    @property
    def not_(self) -> "FakeQuery":
        self.calls.append(("not_", (), {}))
        return self

    def execute(self):
        return SimpleNamespace(data=self.data, count=self.count)


class FakeSupabaseClient:
    def __init__(self, tables: dict[str, dict[str, Any]] | None = None) -> None:
        self.tables = tables or {}
        self.queries: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        table = self.tables.get(name, {})
        query = FakeQuery(name, data=table.get("data"), count=table.get("count"))
        self.queries.append(query)
        return query


def make_token(
    role: str = "receptionist",
    branch_ids: Sequence[str] = (BRANCH_ID,),
    tenant_id: str = TENANT_ID,
    expires_in: timedelta = timedelta(hours=1),
    secret: str | None = None,
) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": "user-1",
        "tenantId": tenant_id,
        "role": role,
        "branchIds": list(branch_ids),
        "iat": issued,
        "exp": issued + expires_in,
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)
