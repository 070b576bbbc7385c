"""Operation config API: list, get effective, set, reset, bulk (tenant-scoped).

Mutations take the acting user from the X-Actor-ID header; every change is
audited and invalidates the cached policy before the response is sent.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from gatekeeper.api.v1.dependencies import (
    ActorId,
    Services,
    TenantId,
    get_mutator,
    get_resolver,
)
from gatekeeper.application.services.bounded import call_store
from gatekeeper.application.services.config_mutator import ConfigMutator
from gatekeeper.application.services.permission_resolver import PermissionResolver
from gatekeeper.domain.entities.policy import OperationPermissionConfig
from gatekeeper.schemas.permission import (
    BulkCategoryRequest,
    BulkConfigRequest,
    BulkConfigResponse,
    EffectivePolicyResponse,
    OperationConfigResponse,
)

router = APIRouter()

Mutator = Annotated[ConfigMutator, Depends(get_mutator)]
Resolver = Annotated[PermissionResolver, Depends(get_resolver)]


def _to_response(config: OperationPermissionConfig) -> OperationConfigResponse:
    return OperationConfigResponse(
        tenant_id=config.tenant_id,
        operation_name=config.operation_name,
        policy=config.policy.model_dump(mode="json"),
        created_by=config.created_by,
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


@router.get("", response_model=list[OperationConfigResponse])
async def list_operation_configs(tenant_id: TenantId, services: Services):
    """List stored overrides for tenant (operations on their default are not listed)."""
    configs = await call_store(
        services.stores.config.list_for_tenant(tenant_id),
        services.settings.store_timeout_seconds,
        "config_store.list_for_tenant",
    )
    return [_to_response(c) for c in configs]


@router.post("/bulk", response_model=BulkConfigResponse)
async def bulk_set_operation_configs(
    tenant_id: TenantId, body: BulkConfigRequest, actor_id: ActorId, mutator: Mutator
) -> BulkConfigResponse:
    """Apply one policy to several operations; locked operations are reported, not failed."""
    result = await mutator.bulk_set_operation_config(
        tenant_id, body.operation_names, body.policy, actor_id
    )
    return BulkConfigResponse(updated=result.updated, not_configurable=result.not_configurable)


@router.post("/bulk-category", response_model=BulkConfigResponse)
async def bulk_set_category(
    tenant_id: TenantId, body: BulkCategoryRequest, actor_id: ActorId, mutator: Mutator
) -> BulkConfigResponse:
    """Apply one policy to every registered operation of a category."""
    result = await mutator.bulk_set_category(tenant_id, body.category, body.policy, actor_id)
    return BulkConfigResponse(updated=result.updated, not_configurable=result.not_configurable)


@router.get("/{operation_name}", response_model=EffectivePolicyResponse)
async def get_effective_policy(
    tenant_id: TenantId, operation_name: str, resolver: Resolver
) -> EffectivePolicyResponse:
    """Return the policy in force: stored override, else the operation's default."""
    effective = await resolver.get_effective_policy(tenant_id, operation_name)
    return EffectivePolicyResponse(
        operation_name=operation_name,
        is_default=effective.is_default,
        policy=effective.policy.model_dump(mode="json"),
    )


@router.put("/{operation_name}", response_model=OperationConfigResponse)
async def set_operation_config(
    tenant_id: TenantId,
    operation_name: str,
    body: dict[str, Any],
    actor_id: ActorId,
    mutator: Mutator,
) -> OperationConfigResponse:
    """Replace the override. Body is a policy object tagged by "level"."""
    config = await mutator.set_operation_config(tenant_id, operation_name, body, actor_id)
    return _to_response(config)


@router.delete("/{operation_name}", status_code=204)
async def reset_operation_config(
    tenant_id: TenantId, operation_name: str, actor_id: ActorId, mutator: Mutator
) -> Response:
    """Remove the override so the default policy applies. Idempotent."""
    await mutator.reset_operation_config(tenant_id, operation_name, actor_id)
    return Response(status_code=204)
