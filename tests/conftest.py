"""Pytest configuration and fixtures for gatekeeper.

Services are built over the in-memory stores with a FakeClock, so unit and
API tests need no database or Redis. HTTP tests use an app from
gatekeeper.main.create_app() with app.state.services preset (the lifespan
then leaves it alone).
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from gatekeeper.core.composition import PermissionServices, build_services, memory_stores
from gatekeeper.core.config import Settings
from gatekeeper.domain.enums import Capability
from gatekeeper.domain.value_objects.core import Actor, Tenant
from gatekeeper.infrastructure.cache.memory_cache import InMemoryCache
from gatekeeper.main import create_app

TENANT_ID = "100000000000000001"
OTHER_TENANT_ID = "100000000000000002"
OWNER_ID = "200000000000000001"
DEVELOPER_ID = "200000000000000002"
ADMIN_ID = "200000000000000003"
MEMBER_ID = "200000000000000004"
MODERATOR_ID = "200000000000000005"
NATIVE_ROLE_ID = "300000000000000001"

OPERATION_CATEGORIES = {
    "ban": "admin",
    "purge": "message",
    "eval": "dev",
    "ping": "general",
    "warn": "moderation",
    "economy.pay": "economy",
    "economy.daily": "economy",
}


class FakeClock:
    """Clock whose time only moves when a test advances it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def make_settings(**overrides) -> Settings:
    """Settings for tests: no .env, one developer, a small operation catalogue."""
    values = {
        "developer_user_ids": DEVELOPER_ID,
        "operation_categories": OPERATION_CATEGORIES,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def member(user_id: str = MEMBER_ID, permissions: int = 0, role_ids=()) -> Actor:
    return Actor(user_id=user_id, role_ids=frozenset(role_ids), permissions=permissions)


def admin() -> Actor:
    return Actor(user_id=ADMIN_ID, permissions=int(Capability.ADMINISTRATOR))


def tenant(tenant_id: str = TENANT_ID) -> Tenant:
    return Tenant(tenant_id=tenant_id, owner_id=OWNER_ID)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
async def services(settings: Settings, clock: FakeClock) -> PermissionServices:
    """Services over fresh in-memory stores, no distributed cache. Background audit writes are drained after the test."""
    services = build_services(settings, memory_stores(), clock=clock)
    yield services
    await services.audit.drain()


@pytest.fixture
def distributed_cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock)


@pytest.fixture
async def client(services: PermissionServices) -> AsyncClient:
    """Async HTTP client against a fresh FastAPI app (ASGI) sharing the services fixture."""
    app = create_app()
    app.state.services = services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def actor_headers() -> dict[str, str]:
    """Headers for mutating requests made by the tenant owner."""
    return {"X-Actor-ID": OWNER_ID}
