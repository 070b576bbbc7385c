"""Permission audit entry. Append-only; never updated or deleted by this engine."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gatekeeper.domain.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """Who changed or was refused what, when.

    old_value/new_value hold JSON-compatible snapshots of the policy (or
    maintenance payload) before and after the change.
    """

    tenant_id: str
    action: AuditAction
    actor_id: str
    timestamp: datetime
    operation_name: str | None = None
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    reason: str | None = None
    id: str | None = None
