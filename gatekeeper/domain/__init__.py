"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from gatekeeper.domain.enums import AuditAction, Capability, OperationCategory, PermissionLevel
from gatekeeper.domain.exceptions import (
    CacheUnavailableException,
    ConfigValidationException,
    DuplicateAssignmentException,
    GatekeeperException,
    OperationNotConfigurableException,
    PersistenceException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "AuditAction",
    "CacheUnavailableException",
    "Capability",
    "ConfigValidationException",
    "DuplicateAssignmentException",
    "GatekeeperException",
    "OperationCategory",
    "OperationNotConfigurableException",
    "PermissionLevel",
    "PersistenceException",
    "ResourceNotFoundException",
    "ValidationException",
]
