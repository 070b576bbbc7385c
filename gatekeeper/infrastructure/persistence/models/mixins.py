"""Column mixins shared by the policy, role, maintenance and audit tables."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from gatekeeper.shared.utils.generators import generate_cuid

# Platform ids are at most 20 decimal digits.
SNOWFLAKE_LENGTH = 20


class CuidMixin:
    """Surrogate CUID primary key for rows the engine creates."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """Mixin for multi-tenant models. tenant_id is the platform guild id (no tenant table)."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(String(SNOWFLAKE_LENGTH), nullable=False, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware).

    Repositories set both explicitly from the injected clock; the server
    defaults only cover rows written by other tools.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """Base for tenant-scoped rows with a CUID key and timestamps."""

    __abstract__ = True
