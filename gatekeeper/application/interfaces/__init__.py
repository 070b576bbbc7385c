"""Application interfaces (ports): store, cache and clock protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from gatekeeper.infrastructure or gatekeeper.api.
"""

from gatekeeper.application.interfaces.repositories import (
    IAuditLog,
    IConfigStore,
    IMaintenanceStore,
    IRoleManagementStore,
    IRoleStore,
)
from gatekeeper.application.interfaces.services import ICache, IClock

__all__ = [
    "IAuditLog",
    "ICache",
    "IClock",
    "IConfigStore",
    "IMaintenanceStore",
    "IRoleManagementStore",
    "IRoleStore",
]
