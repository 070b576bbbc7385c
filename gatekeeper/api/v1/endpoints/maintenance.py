"""Maintenance mode API: status, enable, allow user, disable (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from gatekeeper.api.v1.dependencies import ActorId, TenantId, get_maintenance_gate
from gatekeeper.application.services.maintenance_gate import MaintenanceGate
from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.domain.exceptions import ResourceNotFoundException
from gatekeeper.schemas.maintenance import (
    MaintenanceAllowUserRequest,
    MaintenanceEnableRequest,
    MaintenanceStatusResponse,
)

router = APIRouter()

Gate = Annotated[MaintenanceGate, Depends(get_maintenance_gate)]


def _to_response(tenant_id: str, state: MaintenanceState | None) -> MaintenanceStatusResponse:
    if state is None:
        return MaintenanceStatusResponse(tenant_id=tenant_id, enabled=False)
    return MaintenanceStatusResponse(
        tenant_id=tenant_id,
        enabled=state.enabled,
        enabled_by=state.enabled_by,
        enabled_at=state.enabled_at,
        allowed_user_ids=sorted(state.allowed_user_ids),
        reason=state.reason,
    )


@router.get("", response_model=MaintenanceStatusResponse)
async def get_maintenance_status(tenant_id: TenantId, gate: Gate) -> MaintenanceStatusResponse:
    return _to_response(tenant_id, await gate.status(tenant_id))


@router.put("", response_model=MaintenanceStatusResponse)
async def enable_maintenance(
    tenant_id: TenantId, body: MaintenanceEnableRequest, actor_id: ActorId, gate: Gate
) -> MaintenanceStatusResponse:
    """Lock the tenant down; the acting user stays allowlisted."""
    state = await gate.enable(tenant_id, body.reason, actor_id)
    return _to_response(tenant_id, state)


@router.post("/allowed-users", response_model=MaintenanceStatusResponse)
async def allow_user(
    tenant_id: TenantId, body: MaintenanceAllowUserRequest, actor_id: ActorId, gate: Gate
) -> MaintenanceStatusResponse:
    """Let one more user through an active lockdown. 404 if not in maintenance."""
    state = await gate.allow_user(tenant_id, body.user_id, actor_id)
    if state is None:
        raise ResourceNotFoundException("maintenance_mode", tenant_id)
    return _to_response(tenant_id, state)


@router.delete("", status_code=204)
async def disable_maintenance(tenant_id: TenantId, actor_id: ActorId, gate: Gate) -> Response:
    await gate.disable(tenant_id, actor_id)
    return Response(status_code=204)
