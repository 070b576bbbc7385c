"""Application services: the permission resolver and its collaborators."""

from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.config_mutator import ConfigMutator
from gatekeeper.application.services.maintenance_gate import MaintenanceGate
from gatekeeper.application.services.operation_registry import OperationRegistry
from gatekeeper.application.services.permission_resolver import PermissionResolver
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.application.services.role_resolver import RoleResolver
from gatekeeper.application.services.role_service import RoleService

__all__ = [
    "AuditRecorder",
    "ConfigMutator",
    "MaintenanceGate",
    "OperationRegistry",
    "PermissionResolver",
    "PolicyCache",
    "RoleResolver",
    "RoleService",
]
