"""Tenant maintenance (lockdown) state."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MaintenanceState:
    """One per tenant. While enabled, only allowed_user_ids may run operations.

    The enabling actor is always in allowed_user_ids so they cannot lock
    themselves out.
    """

    tenant_id: str
    enabled: bool
    enabled_by: str
    enabled_at: datetime
    allowed_user_ids: frozenset[str] = field(default_factory=frozenset)
    reason: str | None = None

    def blocks(self, user_id: str) -> bool:
        """Return True if this state locks user_id out of the tenant."""
        return self.enabled and user_id not in self.allowed_user_ids
