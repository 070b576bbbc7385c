"""Tests for the custom role endpoints."""

from httpx import AsyncClient

from tests.conftest import MEMBER_ID, OWNER_ID, TENANT_ID

BASE = f"/api/v1/tenants/{TENANT_ID}/roles"


async def _create(client: AsyncClient, headers: dict[str, str], name: str = "support", permissions=None) -> dict:
    response = await client.post(
        BASE, json={"name": name, "permissions": permissions or []}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


async def test_create_list_get_delete(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    role = await _create(client, actor_headers, permissions=["operation.ping"])
    assert role["permissions"] == ["operation.ping"]
    assert role["assignment_count"] == 0

    listed = (await client.get(BASE)).json()
    assert [r["name"] for r in listed] == ["support"]
    assert (await client.get(f"{BASE}/{role['id']}")).json()["name"] == "support"

    assert (await client.delete(f"{BASE}/{role['id']}", headers=actor_headers)).status_code == 204
    assert (await client.get(f"{BASE}/{role['id']}")).status_code == 404


async def test_duplicate_name_returns_409(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    await _create(client, actor_headers)
    response = await client.post(BASE, json={"name": "support"}, headers=actor_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_ASSIGNMENT"


async def test_invalid_permission_returns_400(client: AsyncClient, actor_headers: dict[str, str]) -> None:
    role = await _create(client, actor_headers)
    response = await client.post(
        f"{BASE}/{role['id']}/permissions", json={"permission": "ban"}, headers=actor_headers
    )
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "permission"


async def test_permissions_and_assignments_drive_checks(
    client: AsyncClient, actor_headers: dict[str, str]
) -> None:
    role = await _create(client, actor_headers)
    role_id = role["id"]
    check = {"actor": {"user_id": MEMBER_ID}, "operation_name": "ban"}
    check_url = f"/api/v1/tenants/{TENANT_ID}/check"

    granted = await client.post(
        f"{BASE}/{role_id}/permissions", json={"permission": "operation.ban"}, headers=actor_headers
    )
    assert granted.json()["permissions"] == ["operation.ban"]

    assigned = await client.put(f"{BASE}/{role_id}/assignments/{MEMBER_ID}", headers=actor_headers)
    assert assigned.status_code == 201
    assert assigned.json()["assigned_by"] == OWNER_ID
    assert (await client.post(check_url, json=check)).json()["allowed"] is True

    again = await client.put(f"{BASE}/{role_id}/assignments/{MEMBER_ID}", headers=actor_headers)
    assert again.status_code == 409

    removed = await client.delete(f"{BASE}/{role_id}/permissions/operation.ban", headers=actor_headers)
    assert removed.json()["permissions"] == []
    assert (await client.post(check_url, json=check)).json()["allowed"] is False

    unassigned = await client.delete(f"{BASE}/{role_id}/assignments/{MEMBER_ID}", headers=actor_headers)
    assert unassigned.status_code == 204
    assert (await client.get(BASE)).json()[0]["assignment_count"] == 0
