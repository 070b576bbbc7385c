"""Tests for the maintenance mode endpoints."""

from httpx import AsyncClient

from tests.conftest import ADMIN_ID, MEMBER_ID, OWNER_ID, TENANT_ID

BASE = f"/api/v1/tenants/{TENANT_ID}/maintenance"


async def test_status_when_not_in_maintenance(client: AsyncClient) -> None:
    response = await client.get(BASE)
    assert response.status_code == 200
    assert response.json()["enabled"] is False


async def test_enable_blocks_other_actors(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    response = await client.put(BASE, json={"reason": "upgrade"}, headers=actor_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is True
    assert data["allowed_user_ids"] == [OWNER_ID]
    assert data["reason"] == "upgrade"

    check = await client.post(
        f"/api/v1/tenants/{TENANT_ID}/check",
        json={"actor": {"user_id": MEMBER_ID}, "operation_name": "ping"},
    )
    assert check.json()["reason"] == "tenant in maintenance"


async def test_allow_user(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    missing = await client.post(f"{BASE}/allowed-users", json={"user_id": MEMBER_ID}, headers=actor_headers)
    assert missing.status_code == 404

    await client.put(BASE, json={}, headers=actor_headers)
    response = await client.post(f"{BASE}/allowed-users", json={"user_id": ADMIN_ID}, headers=actor_headers)
    assert response.status_code == 200
    assert sorted(response.json()["allowed_user_ids"]) == sorted([OWNER_ID, ADMIN_ID])


async def test_disable(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    await client.put(BASE, json={"reason": "upgrade"}, headers=actor_headers)
    response = await client.delete(BASE, headers=actor_headers)
    assert response.status_code == 204
    assert (await client.get(BASE)).json()["enabled"] is False


async def test_reason_too_long_rejected(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    response = await client.put(BASE, json={"reason": "x" * 501}, headers=actor_headers)
    assert response.status_code == 422
