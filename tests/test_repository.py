import asyncio
from datetime import date, datetime, timezone

import pytest

from salon_ops.data import dashboard_repository
from salon_ops.db import supabase as supabase_module
from salon_ops.data.dashboard_repository import (
    SupabaseDashboardStore,
    _count_below_reorder_level,
    _parse_timestamp,
    get_dashboard_store,
)
from salon_ops.errors import StoreUnavailableError

from fakes import BRANCH_ID, DAY, TENANT_ID, FakeSupabaseClient


def _filters(query):
    return [(name, args) for name, args, _ in query.calls]


def test_appointments_rows_are_parsed_and_filters_pushed_down():
    client = FakeSupabaseClient(
        tables={
            "appointments": {
                "data": [
                    {
                        "id": "a1",
                        "stylist_id": "s1",
                        "scheduled_date": "2026-03-10",
                        "scheduled_time": "09:30:00",
                        "end_time": "10:15:00",
                        "status": "booked",
                        "customers": {"name": "Asha", "phone": "+911234567890"},
                        "appointment_services": [
                            {"services": {"name": "Haircut"}},
                            {"services": None},
                        ],
                    },
                    {
                        "id": "a2",
                        "stylist_id": None,
                        "scheduled_date": "2026-03-10",
                        "scheduled_time": "11:00",
                        "end_time": "11:30",
                        "status": "confirmed",
                        "customers": None,
                        "appointment_services": None,
                    },
                ]
            }
        }
    )
    store = SupabaseDashboardStore(client)

    rows = asyncio.run(
        store.list_appointments(
            TENANT_ID, BRANCH_ID, DAY, statuses=("booked", "confirmed"), exclude_statuses=("cancelled",)
        )
    )

    first, second = rows
    assert first.scheduled_time == "09:30"
    assert first.end_time == "10:15"
    assert first.scheduled_date == date(2026, 3, 10)
    assert first.customer_name == "Asha"
    assert first.service_names == ["Haircut", "Service"]
    assert second.stylist_id is None
    assert second.customer_name is None
    assert second.service_names == []

    filters = _filters(client.queries[0])
    assert ("eq", ("tenant_id", TENANT_ID)) in filters
    assert ("eq", ("branch_id", BRANCH_ID)) in filters
    assert ("eq", ("scheduled_date", "2026-03-10")) in filters
    assert ("is_", ("deleted_at", "null")) in filters
    assert ("in_", ("status", ["booked", "confirmed"])) in filters
    assert ("not_", ()) in filters
    assert ("in_", ("status", ["cancelled"])) in filters


def test_tenant_wide_appointments_skip_branch_filter():
    client = FakeSupabaseClient()
    store = SupabaseDashboardStore(client)

    asyncio.run(store.list_appointments(TENANT_ID, None, DAY))

    assert all(args[0] != "branch_id" for name, args in _filters(client.queries[0]) if name == "eq")


def test_empty_stylist_filter_returns_without_querying():
    client = FakeSupabaseClient()
    store = SupabaseDashboardStore(client)

    assert asyncio.run(store.list_appointments(TENANT_ID, BRANCH_ID, DAY, stylist_ids=[])) == []
    assert asyncio.run(store.list_active_breaks(TENANT_ID, [])) == []
    assert asyncio.run(store.get_service_names(TENANT_ID, [])) == {}
    assert client.queries == []


def test_branch_stylists_are_ordered_by_name_then_id():
    client = FakeSupabaseClient(
        tables={"users": {"data": [{"id": "s1", "name": "Meera", "avatar_url": None}]}}
    )
    store = SupabaseDashboardStore(client)

    stylists = asyncio.run(store.list_branch_stylists(TENANT_ID, BRANCH_ID))

    assert [s.name for s in stylists] == ["Meera"]
    filters = _filters(client.queries[0])
    assert [args for name, args in filters if name == "order"] == [("name",), ("id",)]
    assert ("eq", ("user_branches.branch_id", BRANCH_ID)) in filters


def test_walk_in_rows_parse_timestamps_and_service_ids():
    client = FakeSupabaseClient(
        tables={
            "walk_in_queue": {
                "data": [
                    {
                        "id": "w1",
                        "token_number": "7",
                        "customer_id": None,
                        "customer_name": "Dev",
                        "service_ids": ["svc-1"],
                        "status": "waiting",
                        "estimated_wait_minutes": 15,
                        "created_at": "2026-03-10T04:30:00Z",
                    }
                ]
            }
        }
    )
    store = SupabaseDashboardStore(client)

    (entry,) = asyncio.run(store.list_walk_ins(TENANT_ID, BRANCH_ID, DAY, statuses=("waiting",)))

    assert entry.token_number == 7
    assert entry.customer_id is None
    assert entry.service_ids == ["svc-1"]
    assert entry.created_at == datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc)


def test_parse_timestamp_treats_naive_values_as_utc():
    assert _parse_timestamp("2026-03-10T04:30:00") == datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc)
    assert _parse_timestamp("2026-03-10T10:00:00+05:30").utcoffset().total_seconds() == 5.5 * 3600


@pytest.mark.parametrize(
    "value,microsecond",
    [
        ("2026-03-10T09:10:00.1+00:00", 100000),
        ("2026-03-10T09:10:00.12", 120000),
        ("2026-03-10T09:10:00.1234Z", 123400),
        ("2026-03-10T09:10:00.123456789+00:00", 123456),
    ],
)
def test_parse_timestamp_accepts_trimmed_fractional_seconds(value, microsecond):
    parsed = _parse_timestamp(value)

    assert parsed == datetime(2026, 3, 10, 9, 10, 0, microsecond, tzinfo=timezone.utc)


def test_sum_finalized_invoices_adds_grand_totals():
    client = FakeSupabaseClient(
        tables={"invoices": {"data": [{"grand_total": "1200.50"}, {"grand_total": 300}, {"grand_total": None}]}}
    )
    store = SupabaseDashboardStore(client)

    total = asyncio.run(store.sum_finalized_invoices(TENANT_ID, BRANCH_ID, DAY))

    assert total == 1500.5
    filters = _filters(client.queries[0])
    assert ("eq", ("status", "finalized")) in filters
    assert ("gte", ("invoice_date", "2026-03-10")) in filters
    assert ("lt", ("invoice_date", "2026-03-11")) in filters


def test_counts_use_exact_count():
    client = FakeSupabaseClient(
        tables={"attendance": {"count": 5}, "leaves": {"count": None}, "users": {"count": 8}}
    )
    store = SupabaseDashboardStore(client)

    assert asyncio.run(store.count_present_staff(TENANT_ID, BRANCH_ID, DAY)) == 5
    assert asyncio.run(store.count_staff_on_leave(TENANT_ID, BRANCH_ID, DAY)) == 0
    assert asyncio.run(store.count_active_staff(TENANT_ID, None)) == 8
    assert all(query.calls[0][2] == {"count": "exact"} for query in client.queries)


def test_expiring_batches_window():
    client = FakeSupabaseClient(tables={"stock_batches": {"count": 3}})
    store = SupabaseDashboardStore(client)

    count = asyncio.run(store.count_expiring_batches(TENANT_ID, BRANCH_ID, DAY, date(2026, 4, 9)))

    assert count == 3
    filters = _filters(client.queries[0])
    assert ("gte", ("expiry_date", "2026-03-10")) in filters
    assert ("lte", ("expiry_date", "2026-04-09")) in filters


def test_low_stock_compares_summed_batches_with_reorder_level():
    client = FakeSupabaseClient(
        tables={
            "branch_product_settings": {
                "data": [
                    {"branch_id": "b1", "product_id": "p1", "reorder_level": 10},
                    {"branch_id": "b1", "product_id": "p2", "reorder_level": 5},
                    {"branch_id": "b2", "product_id": "p1", "reorder_level": 3},
                ]
            },
            "stock_batches": {
                "data": [
                    {"branch_id": "b1", "product_id": "p1", "available_quantity": 4},
                    {"branch_id": "b1", "product_id": "p1", "available_quantity": 5},
                    {"branch_id": "b1", "product_id": "p2", "available_quantity": 5},
                ]
            },
        }
    )
    store = SupabaseDashboardStore(client)

    # b1/p1 has 9 < 10 and b2/p1 has nothing in stock; b1/p2 sits exactly on its level.
    assert asyncio.run(store.count_low_stock_products(TENANT_ID, None)) == 2


def test_count_below_reorder_level_skips_missing_levels():
    settings_rows = [{"branch_id": "b1", "product_id": "p1", "reorder_level": None}]

    assert _count_below_reorder_level(settings_rows, []) == 0


def test_failed_query_is_logged_and_reraised(caplog):
    class BrokenQuery:
        def execute(self):
            raise ConnectionError("connection reset")

    store = SupabaseDashboardStore(FakeSupabaseClient())

    with pytest.raises(ConnectionError):
        asyncio.run(store._execute(BrokenQuery(), "appointments"))

    assert "Dashboard query 'appointments' failed" in caplog.text


def test_get_dashboard_store_requires_configured_client(monkeypatch):
    monkeypatch.setattr(dashboard_repository, "get_supabase_client", lambda: None)

    with pytest.raises(StoreUnavailableError):
        get_dashboard_store()

    client = FakeSupabaseClient()
    monkeypatch.setattr(dashboard_repository, "get_supabase_client", lambda: client)

    assert isinstance(get_dashboard_store(), SupabaseDashboardStore)


def test_supabase_client_is_none_without_credentials(monkeypatch):
    monkeypatch.setattr(supabase_module.settings, "supabase_url", None)

    assert supabase_module.get_supabase_client() is None


def test_supabase_client_is_built_once(monkeypatch):
    created = []
    monkeypatch.setattr(supabase_module.settings, "supabase_url", "https://demo.supabase.co")
    monkeypatch.setattr(supabase_module.settings, "supabase_key", "service-role-key")
    monkeypatch.setattr(supabase_module, "create_client", lambda url, key: created.append((url, key)) or object())

    first = supabase_module.get_supabase_client()

    assert supabase_module.get_supabase_client() is first
    assert created == [("https://demo.supabase.co", "service-role-key")]
