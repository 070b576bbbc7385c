"""Maintenance mode ORM model. At most one row per tenant."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.infrastructure.persistence.database import Base, JSONType
from gatekeeper.infrastructure.persistence.models.mixins import SNOWFLAKE_LENGTH


class MaintenanceModeModel(Base):
    """Table: maintenance_mode. Keyed by tenant_id."""

    __tablename__ = "maintenance_mode"

    tenant_id: Mapped[str] = mapped_column(String(SNOWFLAKE_LENGTH), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enabled_by: Mapped[str] = mapped_column(String(SNOWFLAKE_LENGTH), nullable=False)
    enabled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    allowed_user_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
