"""Operation permission ORM model. One override per (tenant, operation)."""

from typing import Any

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.infrastructure.persistence.database import Base, JSONType
from gatekeeper.infrastructure.persistence.models.mixins import SNOWFLAKE_LENGTH, MultiTenantModel


class OperationPermissionModel(MultiTenantModel, Base):
    """Table: operation_permission. Unique (tenant_id, operation_name).

    Level-specific fields are stored as JSON lists and are empty for levels
    that do not use them.
    """

    __tablename__ = "operation_permission"

    operation_name: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    required_capabilities: Mapped[list[int]] = mapped_column(JSONType, nullable=False, default=list)
    required_role_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    allowed_user_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    denied_user_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_configurable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(SNOWFLAKE_LENGTH), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "operation_name", name="uq_operation_permission_tenant_operation"),
    )

    def policy_fields(self) -> dict[str, Any]:
        """Return the stored columns as a raw policy mapping (validated by the caller)."""
        return {
            "level": self.level,
            "required_capabilities": list(self.required_capabilities or []),
            "required_role_ids": list(self.required_role_ids or []),
            "allowed_user_ids": list(self.allowed_user_ids or []),
            "denied_user_ids": list(self.denied_user_ids or []),
            "is_configurable": self.is_configurable,
        }
