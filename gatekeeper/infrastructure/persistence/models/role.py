"""Custom role ORM models. Tenant-scoped RBAC roles and their assignments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from gatekeeper.infrastructure.persistence.database import Base, JSONType
from gatekeeper.infrastructure.persistence.models.mixins import (
    SNOWFLAKE_LENGTH,
    CuidMixin,
    TenantMixin,
)


class CustomRoleModel(CuidMixin, TenantMixin, Base):
    """Table: custom_role. Unique (tenant_id, name). permissions is a JSON list of strings."""

    __tablename__ = "custom_role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    permissions: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_custom_role_tenant_name"),)


class CustomRoleAssignmentModel(CuidMixin, TenantMixin, Base):
    """Table: custom_role_assignment. Unique (role_id, user_id); removed with the role."""

    __tablename__ = "custom_role_assignment"

    user_id: Mapped[str] = mapped_column(String(SNOWFLAKE_LENGTH), nullable=False)
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("custom_role.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_by: Mapped[str | None] = mapped_column(String(SNOWFLAKE_LENGTH), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("role_id", "user_id", name="uq_custom_role_assignment_role_user"),
        Index("ix_custom_role_assignment_tenant_user", "tenant_id", "user_id"),
    )
