"""Custom roles API: CRUD, permission grants, assignments (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from gatekeeper.api.v1.dependencies import ActorId, TenantId, get_role_service
from gatekeeper.application.services.role_service import RoleService
from gatekeeper.domain.entities.role import CustomRole
from gatekeeper.schemas.permission import SNOWFLAKE_PATTERN
from gatekeeper.schemas.role import (
    CustomRoleCreate,
    CustomRoleResponse,
    RoleAssignmentResponse,
    RolePermissionRequest,
)

router = APIRouter()

Roles = Annotated[RoleService, Depends(get_role_service)]
UserId = Annotated[str, Path(pattern=SNOWFLAKE_PATTERN)]


def _to_response(role: CustomRole, assignment_count: int | None = None) -> CustomRoleResponse:
    return CustomRoleResponse(
        id=role.id,
        tenant_id=role.tenant_id,
        name=role.name,
        permissions=sorted(role.permissions),
        created_at=role.created_at,
        assignment_count=assignment_count,
    )


@router.post("", response_model=CustomRoleResponse, status_code=201)
async def create_role(
    tenant_id: TenantId, body: CustomRoleCreate, _actor_id: ActorId, roles: Roles
) -> CustomRoleResponse:
    """Create a custom role. 409 if the name is taken in this tenant."""
    role = await roles.create_role(tenant_id, body.name, body.permissions)
    return _to_response(role, 0)


@router.get("", response_model=list[CustomRoleResponse])
async def list_roles(tenant_id: TenantId, roles: Roles):
    """List roles for tenant with their assignment counts."""
    return [_to_response(s.role, s.assignment_count) for s in await roles.list_roles(tenant_id)]


@router.get("/{role_id}", response_model=CustomRoleResponse)
async def get_role(tenant_id: TenantId, role_id: str, roles: Roles) -> CustomRoleResponse:
    return _to_response(await roles.get_role(tenant_id, role_id))


@router.delete("/{role_id}", status_code=204)
async def delete_role(tenant_id: TenantId, role_id: str, _actor_id: ActorId, roles: Roles) -> Response:
    """Delete role and all its assignments."""
    await roles.delete_role(tenant_id, role_id)
    return Response(status_code=204)


@router.post("/{role_id}/permissions", response_model=CustomRoleResponse)
async def add_role_permission(
    tenant_id: TenantId,
    role_id: str,
    body: RolePermissionRequest,
    _actor_id: ActorId,
    roles: Roles,
) -> CustomRoleResponse:
    return _to_response(await roles.add_permission(tenant_id, role_id, body.permission))


@router.delete("/{role_id}/permissions/{permission}", response_model=CustomRoleResponse)
async def remove_role_permission(
    tenant_id: TenantId, role_id: str, permission: str, _actor_id: ActorId, roles: Roles
) -> CustomRoleResponse:
    return _to_response(await roles.remove_permission(tenant_id, role_id, permission))


@router.put("/{role_id}/assignments/{user_id}", response_model=RoleAssignmentResponse, status_code=201)
async def assign_role(
    tenant_id: TenantId, role_id: str, user_id: UserId, actor_id: ActorId, roles: Roles
) -> RoleAssignmentResponse:
    """Assign role to user. 409 if already assigned."""
    assignment = await roles.assign_role(tenant_id, role_id, user_id, assigned_by=actor_id)
    return RoleAssignmentResponse(
        tenant_id=assignment.tenant_id,
        role_id=assignment.role_id,
        user_id=assignment.user_id,
        assigned_by=assignment.assigned_by,
        assigned_at=assignment.assigned_at,
    )


@router.delete("/{role_id}/assignments/{user_id}", status_code=204)
async def unassign_role(
    tenant_id: TenantId, role_id: str, user_id: UserId, _actor_id: ActorId, roles: Roles
) -> Response:
    await roles.unassign_role(tenant_id, role_id, user_id)
    return Response(status_code=204)
