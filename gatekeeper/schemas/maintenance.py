"""Request/response schemas for tenant maintenance mode."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.schemas.permission import SNOWFLAKE_PATTERN


class MaintenanceEnableRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class MaintenanceAllowUserRequest(BaseModel):
    user_id: str = Field(..., pattern=SNOWFLAKE_PATTERN)


class MaintenanceStatusResponse(BaseModel):
    """Maintenance state of a tenant. enabled is False when no lockdown is stored."""

    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    enabled: bool
    enabled_by: str | None = None
    enabled_at: datetime | None = None
    allowed_user_ids: list[str] = Field(default_factory=list)
    reason: str | None = None
