"""Expands an actor's custom-role assignments into permission strings."""

from __future__ import annotations

import logging

from pydantic import TypeAdapter

from gatekeeper.application.interfaces.repositories import IRoleStore
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.core.constants import CACHE_KIND_ROLES
from gatekeeper.domain.value_objects.core import grants_operation

logger = logging.getLogger(__name__)

_permissions_adapter: TypeAdapter[frozenset[str]] = TypeAdapter(frozenset[str])


class RoleResolver:
    """Union of permission strings over the actor's custom roles in a tenant.

    Results are memoized per (tenant, user) in the PolicyCache; RoleService
    invalidates the tenant's role entries on every change.
    """

    def __init__(self, role_store: IRoleStore, policy_cache: PolicyCache) -> None:
        self._store = role_store
        self._cache = policy_cache

    async def get_permissions(self, user_id: str, tenant_id: str) -> frozenset[str]:
        """Return the actor's RBAC permission strings in tenant (empty if none)."""
        return await self._cache.get_or_load(
            CACHE_KIND_ROLES,
            tenant_id,
            user_id,
            lambda: self._load(user_id, tenant_id),
            _permissions_adapter,
        )

    async def grants(self, user_id: str, tenant_id: str, operation_name: str) -> bool:
        """Return True if a custom role grants operation.<name> or a matching wildcard."""
        permissions = await self.get_permissions(user_id, tenant_id)
        return grants_operation(permissions, operation_name)

    async def _load(self, user_id: str, tenant_id: str) -> frozenset[str]:
        role_ids = await self._store.get_assigned_role_ids(user_id, tenant_id)
        if not role_ids:
            return frozenset()
        roles = await self._store.get_roles(role_ids)
        permissions = frozenset(p for role in roles for p in role.permissions)
        logger.debug(
            "Resolved %d custom role permission(s) for user %s in tenant %s",
            len(permissions),
            user_id,
            tenant_id,
        )
        return permissions
