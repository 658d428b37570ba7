import pytest
from fastapi.testclient import TestClient

from salon_ops.data.dashboard_repository import get_dashboard_store
from salon_ops.db.supabase import get_supabase_client
from salon_ops.main import create_app
from salon_ops.models.domain import Stylist

from fakes import FakeDashboardStore


@pytest.fixture(autouse=True)
def clear_client_cache():
    get_supabase_client.cache_clear()
    yield
    get_supabase_client.cache_clear()


@pytest.fixture
def stylists() -> list[Stylist]:
    return [
        Stylist(id="s1", name="Meera", avatar_url="https://cdn.example.com/meera.png"),
        Stylist(id="s2", name="Ravi"),
    ]


@pytest.fixture
def store(stylists) -> FakeDashboardStore:
    return FakeDashboardStore(stylists=stylists)


@pytest.fixture
def api_client(store: FakeDashboardStore) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_dashboard_store] = lambda: store
    return TestClient(app, raise_server_exceptions=False)
