"""Persistence models: ORM entities and mixins."""

from gatekeeper.infrastructure.persistence.models.audit_log import PermissionAuditLogModel
from gatekeeper.infrastructure.persistence.models.maintenance import MaintenanceModeModel
from gatekeeper.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
)
from gatekeeper.infrastructure.persistence.models.permission import OperationPermissionModel
from gatekeeper.infrastructure.persistence.models.role import (
    CustomRoleAssignmentModel,
    CustomRoleModel,
)

__all__ = [
    "CuidMixin",
    "CustomRoleAssignmentModel",
    "CustomRoleModel",
    "MaintenanceModeModel",
    "MultiTenantModel",
    "OperationPermissionModel",
    "PermissionAuditLogModel",
    "TenantMixin",
    "TimestampMixin",
]
