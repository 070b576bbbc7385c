"""Persistence repositories. Re-exports for the composition root."""

from gatekeeper.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.infrastructure.persistence.repositories.config_repo import ConfigRepository
from gatekeeper.infrastructure.persistence.repositories.maintenance_repo import (
    MaintenanceRepository,
)
from gatekeeper.infrastructure.persistence.repositories.role_repo import RoleRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "ConfigRepository",
    "MaintenanceRepository",
    "RoleRepository",
]
