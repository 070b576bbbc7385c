"""Tests for the audit log endpoint."""

from httpx import AsyncClient

from tests.conftest import TENANT_ID, FakeClock

BASE = f"/api/v1/tenants/{TENANT_ID}"


async def test_audit_log_newest_first(
    client: AsyncClient, clock: FakeClock, actor_headers: dict[str, str]
) -> None:
    for level in ("public", "owner", "admin"):
        await client.put(f"{BASE}/operations/ban", json={"level": level}, headers=actor_headers)
        clock.advance(1)

    response = await client.get(f"{BASE}/audit-log", params={"limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["limit"] == 2
    assert [item["new_value"]["level"] for item in data["items"]] == ["admin", "owner"]
    assert all(item["action"] == "update" for item in data["items"])


async def test_audit_log_filters_by_operation(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    await client.put(f"{BASE}/operations/ban", json={"level": "public"}, headers=actor_headers)
    await client.put(f"{BASE}/operations/ping", json={"level": "admin"}, headers=actor_headers)

    response = await client.get(f"{BASE}/audit-log", params={"operation_name": "ping"})
    assert [item["operation_name"] for item in response.json()["items"]] == ["ping"]


async def test_limit_is_clamped(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/audit-log", params={"limit": 1000})
    assert response.json()["limit"] == 100
    assert (await client.get(f"{BASE}/audit-log", params={"limit": 0})).status_code == 422
