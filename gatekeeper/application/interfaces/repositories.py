"""Store interfaces (ports) for the application layer.

Protocols define contracts that persistence backends must fulfill (DIP).
"Not found" is an explicit None (or False for deletes); an unreachable store
raises, so callers can tell the two apart.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gatekeeper.domain.entities.audit import AuditEntry
    from gatekeeper.domain.entities.maintenance import MaintenanceState
    from gatekeeper.domain.entities.policy import OperationPermissionConfig
    from gatekeeper.domain.entities.role import CustomRole, CustomRoleSummary, RoleAssignment


# Operation config store interface
class IConfigStore(Protocol):
    """Per-tenant operation permission overrides. At most one per (tenant, operation)."""

    async def get(self, tenant_id: str, operation_name: str) -> OperationPermissionConfig | None:
        """Return the stored override, or None when the operation uses its default."""

    async def upsert(
        self, tenant_id: str, operation_name: str, config: OperationPermissionConfig
    ) -> OperationPermissionConfig:
        """Insert or replace the override (last writer wins); return what was stored."""

    async def delete(self, tenant_id: str, operation_name: str) -> bool:
        """Delete the override. Return False if there was none."""

    async def list_for_tenant(self, tenant_id: str) -> list[OperationPermissionConfig]:
        """Return every override in the tenant, ordered by operation name."""


# Custom role read interface (decision path)
class IRoleStore(Protocol):
    """Read side of tenant-scoped custom roles."""

    async def get_assigned_role_ids(self, user_id: str, tenant_id: str) -> set[str]:
        """Return ids of custom roles assigned to user in tenant."""

    async def get_roles(self, role_ids: Iterable[str]) -> list[CustomRole]:
        """Return roles by id; unknown ids are skipped."""


# Custom role management interface
class IRoleManagementStore(IRoleStore, Protocol):
    """Write side of custom roles and assignments (RoleService)."""

    async def create_role(self, role: CustomRole) -> CustomRole:
        """Persist a new role. Raise DuplicateAssignmentException if (tenant, name) exists."""

    async def get_role(self, tenant_id: str, role_id: str) -> CustomRole | None:
        """Return role by id within tenant."""

    async def get_role_by_name(self, tenant_id: str, name: str) -> CustomRole | None:
        """Return role by (tenant, name)."""

    async def delete_role(self, tenant_id: str, role_id: str) -> bool:
        """Delete role and its assignments. Return False if not found."""

    async def list_roles(self, tenant_id: str) -> list[CustomRoleSummary]:
        """Return roles in tenant (by name) with their assignment counts."""

    async def set_role_permissions(
        self, tenant_id: str, role_id: str, permissions: frozenset[str]
    ) -> CustomRole | None:
        """Replace the role's permission set. Return None if the role does not exist."""

    async def add_assignment(self, assignment: RoleAssignment) -> bool:
        """Assign role to user. Return False if the assignment already exists."""

    async def remove_assignment(self, tenant_id: str, user_id: str, role_id: str) -> bool:
        """Unassign role from user. Return False if it was not assigned."""


# Maintenance store interface
class IMaintenanceStore(Protocol):
    """One maintenance state per tenant."""

    async def get(self, tenant_id: str) -> MaintenanceState | None:
        """Return the tenant's maintenance state, or None if not in maintenance."""

    async def upsert(self, tenant_id: str, state: MaintenanceState) -> MaintenanceState:
        """Insert or replace the tenant's state."""

    async def delete(self, tenant_id: str) -> bool:
        """Remove the tenant's state. Return False if there was none."""


# Audit log interface
class IAuditLog(Protocol):
    """Append-only permission audit log."""

    async def append(self, entry: AuditEntry) -> AuditEntry:
        """Persist one entry; return it with its id set."""

    async def query(
        self, tenant_id: str, limit: int, operation_name: str | None = None
    ) -> list[AuditEntry]:
        """Return at most limit entries for tenant, newest first."""
