"""Tests for the permission check and effective-level endpoints."""

from httpx import AsyncClient

from gatekeeper.core.composition import PermissionServices
from gatekeeper.domain.enums import Capability
from tests.conftest import ADMIN_ID, DEVELOPER_ID, MEMBER_ID, OWNER_ID, TENANT_ID

CHECK_URL = f"/api/v1/tenants/{TENANT_ID}/check"


def _check(user_id: str, operation_name: str, permissions: int = 0, role_ids=()) -> dict:
    return {
        "actor": {"user_id": user_id, "permissions": permissions, "role_ids": list(role_ids)},
        "operation_name": operation_name,
        "owner_id": OWNER_ID,
    }


async def test_allowed_check(client: AsyncClient) -> None:
    response = await client.post(CHECK_URL, json=_check(MEMBER_ID, "ping"))
    assert response.status_code == 200
    assert response.json() == {"allowed": True, "reason": None, "bypassed_by": None}


async def test_denied_check_is_still_200(client: AsyncClient) -> None:
    response = await client.post(CHECK_URL, json=_check(MEMBER_ID, "ban"))
    assert response.status_code == 200
    assert response.json()["allowed"] is False
    assert response.json()["reason"] == "insufficient permissions"


async def test_administrator_passes_admin_operation(client: AsyncClient) -> None:
    response = await client.post(
        CHECK_URL, json=_check(ADMIN_ID, "ban", permissions=int(Capability.ADMINISTRATOR))
    )
    assert response.json()["allowed"] is True


async def test_developer_bypass_reported(client: AsyncClient) -> None:
    response = await client.post(CHECK_URL, json=_check(DEVELOPER_ID, "eval"))
    assert response.json()["bypassed_by"] == "developer"


async def test_owner_from_request(client: AsyncClient, services: PermissionServices) -> None:
    await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "owner"}, OWNER_ID)
    response = await client.post(CHECK_URL, json=_check(OWNER_ID, "ban"))
    assert response.json()["allowed"] is True


async def test_malformed_actor_returns_422(client: AsyncClient) -> None:
    response = await client.post(CHECK_URL, json=_check("alice", "ping"))
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_malformed_tenant_returns_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/tenants/guild/check", json=_check(MEMBER_ID, "ping"))
    assert response.status_code == 422


async def test_effective_level(client: AsyncClient) -> None:
    response = await client.post(
        f"/api/v1/tenants/{TENANT_ID}/effective-level",
        json={"actor": {"user_id": MEMBER_ID, "permissions": int(Capability.KICK_MEMBERS)}},
    )
    assert response.status_code == 200
    assert response.json() == {"level": "moderator"}
