"""Response schemas for the permission audit log API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from gatekeeper.domain.enums import AuditAction


class AuditLogEntryResponse(BaseModel):
    """Single audit log entry (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str | None
    tenant_id: str
    operation_name: str | None = None
    action: AuditAction
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    actor_id: str
    reason: str | None = None
    timestamp: datetime


class AuditLogListResponse(BaseModel):
    """Newest-first slice of the audit log (not a cursor)."""

    items: list[AuditLogEntryResponse]
    limit: int
