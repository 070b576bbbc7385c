"""Custom role domain entities (tenant-scoped RBAC)."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CustomRole:
    """Tenant-defined role carrying permission strings. Unique (tenant_id, name)."""

    id: str
    tenant_id: str
    name: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None


@dataclass(frozen=True)
class RoleAssignment:
    """Many-to-many link between an actor and a custom role within a tenant."""

    tenant_id: str
    user_id: str
    role_id: str
    assigned_by: str | None = None
    assigned_at: datetime | None = None


@dataclass(frozen=True)
class CustomRoleSummary:
    """Role with the number of actors currently assigned to it."""

    role: CustomRole
    assignment_count: int
