"""Process-local implementations of the store protocols.

Used when database_backend is 'memory' (development, tests, single-process
bots). State is lost on restart. Each method completes without awaiting, so
no lock is needed on a single event loop.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable
from dataclasses import replace

from gatekeeper.domain.entities.audit import AuditEntry
from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.domain.entities.policy import OperationPermissionConfig
from gatekeeper.domain.entities.role import CustomRole, CustomRoleSummary, RoleAssignment
from gatekeeper.domain.exceptions import DuplicateAssignmentException
from gatekeeper.shared.utils.generators import generate_cuid


class InMemoryConfigStore:
    """IConfigStore keyed by (tenant_id, operation_name)."""

    def __init__(self) -> None:
        self._configs: dict[tuple[str, str], OperationPermissionConfig] = {}

    async def get(self, tenant_id: str, operation_name: str) -> OperationPermissionConfig | None:
        return self._configs.get((tenant_id, operation_name))

    async def upsert(
        self, tenant_id: str, operation_name: str, config: OperationPermissionConfig
    ) -> OperationPermissionConfig:
        self._configs[(tenant_id, operation_name)] = config
        return config

    async def delete(self, tenant_id: str, operation_name: str) -> bool:
        return self._configs.pop((tenant_id, operation_name), None) is not None

    async def list_for_tenant(self, tenant_id: str) -> list[OperationPermissionConfig]:
        return [
            config
            for (tid, _), config in sorted(self._configs.items())
            if tid == tenant_id
        ]


class InMemoryRoleStore:
    """IRoleManagementStore over plain dicts."""

    def __init__(self) -> None:
        self._roles: dict[str, CustomRole] = {}
        # (tenant_id, user_id, role_id) -> assignment
        self._assignments: dict[tuple[str, str, str], RoleAssignment] = {}

    async def get_assigned_role_ids(self, user_id: str, tenant_id: str) -> set[str]:
        return {
            role_id
            for (tid, uid, role_id) in self._assignments
            if tid == tenant_id and uid == user_id
        }

    async def get_roles(self, role_ids: Iterable[str]) -> list[CustomRole]:
        roles = [self._roles[r] for r in set(role_ids) if r in self._roles]
        return sorted(roles, key=lambda r: r.name)

    async def create_role(self, role: CustomRole) -> CustomRole:
        if any(r.tenant_id == role.tenant_id and r.name == role.name for r in self._roles.values()):
            raise DuplicateAssignmentException(
                f"Role '{role.name}' already exists", "custom_role", {"role_name": role.name}
            )
        stored = role if role.id else replace(role, id=generate_cuid())
        self._roles[stored.id] = stored
        return stored

    async def get_role(self, tenant_id: str, role_id: str) -> CustomRole | None:
        role = self._roles.get(role_id)
        return role if role is not None and role.tenant_id == tenant_id else None

    async def get_role_by_name(self, tenant_id: str, name: str) -> CustomRole | None:
        for role in self._roles.values():
            if role.tenant_id == tenant_id and role.name == name:
                return role
        return None

    async def delete_role(self, tenant_id: str, role_id: str) -> bool:
        if await self.get_role(tenant_id, role_id) is None:
            return False
        del self._roles[role_id]
        for key in [k for k in self._assignments if k[2] == role_id]:
            del self._assignments[key]
        return True

    async def list_roles(self, tenant_id: str) -> list[CustomRoleSummary]:
        roles = sorted(
            (r for r in self._roles.values() if r.tenant_id == tenant_id), key=lambda r: r.name
        )
        return [
            CustomRoleSummary(
                role=role,
                assignment_count=sum(1 for k in self._assignments if k[2] == role.id),
            )
            for role in roles
        ]

    async def set_role_permissions(
        self, tenant_id: str, role_id: str, permissions: frozenset[str]
    ) -> CustomRole | None:
        role = await self.get_role(tenant_id, role_id)
        if role is None:
            return None
        updated = replace(role, permissions=frozenset(permissions))
        self._roles[role_id] = updated
        return updated

    async def add_assignment(self, assignment: RoleAssignment) -> bool:
        key = (assignment.tenant_id, assignment.user_id, assignment.role_id)
        if key in self._assignments:
            return False
        self._assignments[key] = assignment
        return True

    async def remove_assignment(self, tenant_id: str, user_id: str, role_id: str) -> bool:
        return self._assignments.pop((tenant_id, user_id, role_id), None) is not None


class InMemoryMaintenanceStore:
    """IMaintenanceStore keyed by tenant_id."""

    def __init__(self) -> None:
        self._states: dict[str, MaintenanceState] = {}

    async def get(self, tenant_id: str) -> MaintenanceState | None:
        return self._states.get(tenant_id)

    async def upsert(self, tenant_id: str, state: MaintenanceState) -> MaintenanceState:
        self._states[tenant_id] = state
        return state

    async def delete(self, tenant_id: str) -> bool:
        return self._states.pop(tenant_id, None) is not None


class InMemoryAuditLog:
    """Append-only IAuditLog. Ties on timestamp are broken by insertion order."""

    def __init__(self) -> None:
        self._entries: list[tuple[int, AuditEntry]] = []
        self._seq = itertools.count()

    async def append(self, entry: AuditEntry) -> AuditEntry:
        stored = entry if entry.id else replace(entry, id=generate_cuid())
        self._entries.append((next(self._seq), stored))
        return stored

    async def query(
        self, tenant_id: str, limit: int, operation_name: str | None = None
    ) -> list[AuditEntry]:
        matching = [
            (seq, e)
            for seq, e in self._entries
            if e.tenant_id == tenant_id
            and (operation_name is None or e.operation_name == operation_name)
        ]
        matching.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)
        return [e for _, e in matching[:limit]]

    def __len__(self) -> int:
        return len(self._entries)
