"""Permission audit log ORM model. Append-only record of config changes and denies."""

from datetime import datetime
from typing import Any

from sqlalchemy import Connection, DateTime, Index, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from gatekeeper.infrastructure.persistence.database import Base, JSONType
from gatekeeper.infrastructure.persistence.models.mixins import SNOWFLAKE_LENGTH, CuidMixin, TenantMixin


class PermissionAuditLogModel(CuidMixin, TenantMixin, Base):
    """Table: permission_audit_log. Who changed or was refused what, when. No update/delete."""

    __tablename__ = "permission_audit_log"

    operation_name: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    old_value: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    new_value: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    actor_id: Mapped[str] = mapped_column(String(SNOWFLAKE_LENGTH), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_permission_audit_log_tenant_timestamp", "tenant_id", "timestamp"),
    )


@event.listens_for(PermissionAuditLogModel, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLogModel
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Audit log entries are immutable and cannot be updated.")


@event.listens_for(PermissionAuditLogModel, "before_delete")
def _prevent_audit_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLogModel
) -> None:
    """Audit log entries cannot be deleted by this engine (retention is external)."""
    raise ValueError("Audit log entries cannot be deleted.")
