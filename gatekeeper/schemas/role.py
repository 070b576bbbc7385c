"""Request/response schemas for custom role management."""

from datetime import datetime

from pydantic import BaseModel, Field

from gatekeeper.schemas.permission import SNOWFLAKE_PATTERN


class CustomRoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    permissions: list[str] = Field(default_factory=list)


class RolePermissionRequest(BaseModel):
    permission: str = Field(..., description="operation.<name> or operation.*")


class CustomRoleResponse(BaseModel):
    id: str
    tenant_id: str
    name: str
    permissions: list[str]
    created_at: datetime | None = None
    assignment_count: int | None = None


class RoleAssignmentResponse(BaseModel):
    tenant_id: str
    role_id: str
    user_id: str = Field(..., pattern=SNOWFLAKE_PATTERN)
    assigned_by: str | None = None
    assigned_at: datetime | None = None
