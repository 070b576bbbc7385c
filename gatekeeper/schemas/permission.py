"""Request/response schemas for permission checks and operation configs."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.domain.enums import OperationCategory, PermissionLevel
from gatekeeper.domain.value_objects.core import SNOWFLAKE_RE

SNOWFLAKE_PATTERN = SNOWFLAKE_RE.pattern


class ActorPayload(BaseModel):
    """Actor identity as known to the caller (native roles and capability bits included)."""

    user_id: str = Field(..., pattern=SNOWFLAKE_PATTERN)
    role_ids: list[str] = Field(default_factory=list)
    permissions: int = Field(default=0, ge=0, description="Platform capability bitfield")


class PermissionCheckRequest(BaseModel):
    actor: ActorPayload
    operation_name: str = Field(..., min_length=1, max_length=100)
    owner_id: str | None = Field(default=None, pattern=SNOWFLAKE_PATTERN)


class DecisionResponse(BaseModel):
    allowed: bool
    reason: str | None = None
    bypassed_by: str | None = None


class EffectiveLevelRequest(BaseModel):
    actor: ActorPayload
    owner_id: str | None = Field(default=None, pattern=SNOWFLAKE_PATTERN)


class EffectiveLevelResponse(BaseModel):
    level: PermissionLevel


class EffectivePolicyResponse(BaseModel):
    """Policy in force for an operation; is_default means no stored override."""

    operation_name: str
    is_default: bool
    policy: dict[str, Any]


class OperationConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    operation_name: str
    policy: dict[str, Any]
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BulkConfigRequest(BaseModel):
    """One policy applied to many operations. The policy is validated server-side."""

    operation_names: list[str] = Field(..., min_length=1, max_length=200)
    policy: dict[str, Any]


class BulkCategoryRequest(BaseModel):
    category: OperationCategory
    policy: dict[str, Any]


class BulkConfigResponse(BaseModel):
    updated: list[str]
    not_configurable: list[str]
