"""Permission check API: decide, effective level (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from gatekeeper.api.v1.dependencies import TenantId, get_resolver
from gatekeeper.application.services.permission_resolver import PermissionResolver
from gatekeeper.domain.value_objects.core import Actor, Tenant
from gatekeeper.schemas.permission import (
    ActorPayload,
    DecisionResponse,
    EffectiveLevelRequest,
    EffectiveLevelResponse,
    PermissionCheckRequest,
)

router = APIRouter()

Resolver = Annotated[PermissionResolver, Depends(get_resolver)]


def _to_actor(payload: ActorPayload) -> Actor:
    return Actor(
        user_id=payload.user_id,
        role_ids=frozenset(payload.role_ids),
        permissions=payload.permissions,
    )


@router.post("/check", response_model=DecisionResponse)
async def check_permission(
    tenant_id: TenantId, body: PermissionCheckRequest, resolver: Resolver
) -> DecisionResponse:
    """Decide whether the actor may run the operation. Always 200; denial is in the body."""
    decision = await resolver.check_permission(
        _to_actor(body.actor), body.operation_name, Tenant(tenant_id, body.owner_id)
    )
    return DecisionResponse(
        allowed=decision.allowed, reason=decision.reason, bypassed_by=decision.bypassed_by
    )


@router.post("/effective-level", response_model=EffectiveLevelResponse)
async def effective_level(
    tenant_id: TenantId, body: EffectiveLevelRequest, resolver: Resolver
) -> EffectiveLevelResponse:
    """Return the highest built-in level the actor holds (for display)."""
    level = resolver.effective_level(_to_actor(body.actor), Tenant(tenant_id, body.owner_id))
    return EffectiveLevelResponse(level=level)
