"""Domain entities: operation policies, custom roles, maintenance state, audit entries."""

from gatekeeper.domain.entities.audit import AuditEntry
from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.domain.entities.policy import (
    AdminPolicy,
    CustomPolicy,
    DeveloperPolicy,
    ModeratorPolicy,
    OperationPermissionConfig,
    OperationPolicy,
    OwnerPolicy,
    PublicPolicy,
    default_policy_for_level,
    operation_policy_adapter,
)
from gatekeeper.domain.entities.role import CustomRole, CustomRoleSummary, RoleAssignment

__all__ = [
    "AdminPolicy",
    "AuditEntry",
    "CustomPolicy",
    "CustomRole",
    "CustomRoleSummary",
    "DeveloperPolicy",
    "MaintenanceState",
    "ModeratorPolicy",
    "OperationPermissionConfig",
    "OperationPolicy",
    "OwnerPolicy",
    "PublicPolicy",
    "RoleAssignment",
    "default_policy_for_level",
    "operation_policy_adapter",
]
