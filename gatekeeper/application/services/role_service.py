"""Custom role application service: tenant-scoped RBAC management.

Every mutation invalidates the tenant's cached role grants so the next
permission check sees it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TypeVar

from gatekeeper.application.interfaces.repositories import IRoleManagementStore
from gatekeeper.application.interfaces.services import IClock
from gatekeeper.application.services.bounded import call_store
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.application.services.validators import (
    require_permission_string,
    require_role_name,
    require_snowflake,
)
from gatekeeper.core.constants import CACHE_KIND_ROLES
from gatekeeper.domain.entities.role import CustomRole, CustomRoleSummary, RoleAssignment
from gatekeeper.domain.exceptions import DuplicateAssignmentException, ResourceNotFoundException
from gatekeeper.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MSG_DUPLICATE_ROLE = "Role '%s' already exists"
_MSG_DUPLICATE_PERMISSION = "Role already has permission '%s'"
_MSG_DUPLICATE_ASSIGNMENT = "User already has role '%s'"


class RoleService:
    """Create, delete, list, grant and assign custom roles."""

    def __init__(
        self,
        store: IRoleManagementStore,
        policy_cache: PolicyCache,
        clock: IClock,
        store_timeout: float = 0.25,
    ) -> None:
        self._store = store
        self._cache = policy_cache
        self._clock = clock
        self._store_timeout = store_timeout

    async def _call(self, awaitable: Awaitable[T], operation: str) -> T:
        return await call_store(awaitable, self._store_timeout, f"role_store.{operation}")

    async def _require_role(self, tenant_id: str, role_id: str) -> CustomRole:
        role = await self._call(self._store.get_role(tenant_id, role_id), "get_role")
        if role is None:
            raise ResourceNotFoundException("custom_role", role_id)
        return role

    async def _invalidate(self, tenant_id: str) -> None:
        await self._cache.invalidate_tenant(tenant_id, CACHE_KIND_ROLES)

    async def create_role(
        self, tenant_id: str, name: str, permissions: list[str] | None = None
    ) -> CustomRole:
        """Create a role. Raises DuplicateAssignmentException if the name is taken."""
        require_snowflake(tenant_id, "tenant_id")
        name = require_role_name(name)
        for i, permission in enumerate(permissions or []):
            require_permission_string(permission, f"permissions.{i}")
        # Duplicate check is best-effort; the store's unique constraint is the backstop.
        existing = await self._call(self._store.get_role_by_name(tenant_id, name), "get_role_by_name")
        if existing is not None:
            raise DuplicateAssignmentException(
                _MSG_DUPLICATE_ROLE % name, "custom_role", {"role_name": name}
            )
        role = CustomRole(
            id=generate_cuid(),
            tenant_id=tenant_id,
            name=name,
            permissions=frozenset(permissions or ()),
            created_at=self._clock.now(),
        )
        created = await self._call(self._store.create_role(role), "create_role")
        logger.info("Custom role %s created in tenant %s", name, tenant_id)
        return created

    async def delete_role(self, tenant_id: str, role_id: str) -> None:
        """Delete a role and all its assignments."""
        if not await self._call(self._store.delete_role(tenant_id, role_id), "delete_role"):
            raise ResourceNotFoundException("custom_role", role_id)
        await self._invalidate(tenant_id)
        logger.info("Custom role %s deleted in tenant %s", role_id, tenant_id)

    async def get_role(self, tenant_id: str, role_id: str) -> CustomRole:
        return await self._require_role(tenant_id, role_id)

    async def list_roles(self, tenant_id: str) -> list[CustomRoleSummary]:
        return await self._call(self._store.list_roles(tenant_id), "list_roles")

    async def add_permission(self, tenant_id: str, role_id: str, permission: str) -> CustomRole:
        require_permission_string(permission)
        role = await self._require_role(tenant_id, role_id)
        if permission in role.permissions:
            raise DuplicateAssignmentException(
                _MSG_DUPLICATE_PERMISSION % permission,
                "role_permission",
                {"role_id": role_id, "permission": permission},
            )
        updated = await self._call(
            self._store.set_role_permissions(tenant_id, role_id, role.permissions | {permission}),
            "set_role_permissions",
        )
        if updated is None:
            raise ResourceNotFoundException("custom_role", role_id)
        await self._invalidate(tenant_id)
        return updated

    async def remove_permission(self, tenant_id: str, role_id: str, permission: str) -> CustomRole:
        role = await self._require_role(tenant_id, role_id)
        if permission not in role.permissions:
            raise ResourceNotFoundException("role_permission", permission)
        updated = await self._call(
            self._store.set_role_permissions(tenant_id, role_id, role.permissions - {permission}),
            "set_role_permissions",
        )
        if updated is None:
            raise ResourceNotFoundException("custom_role", role_id)
        await self._invalidate(tenant_id)
        return updated

    async def assign_role(
        self, tenant_id: str, role_id: str, user_id: str, assigned_by: str | None = None
    ) -> RoleAssignment:
        """Assign role to user. Raises DuplicateAssignmentException if already assigned."""
        require_snowflake(user_id, "user_id")
        role = await self._require_role(tenant_id, role_id)
        assignment = RoleAssignment(
            tenant_id=tenant_id,
            user_id=user_id,
            role_id=role_id,
            assigned_by=assigned_by,
            assigned_at=self._clock.now(),
        )
        if not await self._call(self._store.add_assignment(assignment), "add_assignment"):
            raise DuplicateAssignmentException(
                _MSG_DUPLICATE_ASSIGNMENT % role.name,
                "role_assignment",
                {"role_id": role_id, "user_id": user_id},
            )
        await self._invalidate(tenant_id)
        return assignment

    async def unassign_role(self, tenant_id: str, role_id: str, user_id: str) -> None:
        await self._require_role(tenant_id, role_id)
        if not await self._call(
            self._store.remove_assignment(tenant_id, user_id, role_id), "remove_assignment"
        ):
            raise ResourceNotFoundException("role_assignment", f"{role_id}/{user_id}")
        await self._invalidate(tenant_id)
