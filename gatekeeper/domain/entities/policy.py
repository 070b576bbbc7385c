"""Operation permission policies and the per-tenant operation config.

A policy is a tagged variant keyed on ``level``: each variant carries only
the fields its level uses, so a MODERATOR policy cannot silently lose its
capability list and a PUBLIC policy cannot carry role requirements.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter

from gatekeeper.domain.enums import PermissionLevel
from gatekeeper.domain.value_objects.core import Actor, DeveloperAllowlist, Tenant


def _single_bit(value: int) -> int:
    if value <= 0 or value & (value - 1):
        raise ValueError("must be a single platform permission bit")
    return value


SnowflakeId = Annotated[str, StringConstraints(pattern=r"^[0-9]{1,20}$")]
CapabilityBit = Annotated[int, AfterValidator(_single_bit)]


class _PolicyBase(BaseModel):
    """Fields shared by every level: explicit lists and the edit lock."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed_user_ids: frozenset[SnowflakeId] = frozenset()
    denied_user_ids: frozenset[SnowflakeId] = frozenset()
    is_configurable: bool = True

    @property
    def permission_level(self) -> PermissionLevel:
        return PermissionLevel(self.level)  # type: ignore[attr-defined]

    def level_allows(
        self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist
    ) -> bool:
        """Return True if the level itself admits the actor (last step of the chain)."""
        raise NotImplementedError


class DeveloperPolicy(_PolicyBase):
    level: Literal["developer"] = "developer"

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return actor.user_id in developers


class OwnerPolicy(_PolicyBase):
    level: Literal["owner"] = "owner"

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return tenant.is_owner(actor.user_id)


class AdminPolicy(_PolicyBase):
    level: Literal["admin"] = "admin"

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return actor.is_administrator


class ModeratorPolicy(_PolicyBase):
    """Admits holders of any required capability or any required native role."""

    level: Literal["moderator"] = "moderator"
    required_capabilities: frozenset[CapabilityBit] = frozenset()
    required_role_ids: frozenset[SnowflakeId] = frozenset()

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return actor.has_any_capability(self.required_capabilities) or actor.has_any_role(
            self.required_role_ids
        )


class PublicPolicy(_PolicyBase):
    level: Literal["public"] = "public"

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return True


class CustomPolicy(_PolicyBase):
    """Admits members of any required native role."""

    level: Literal["custom"] = "custom"
    required_role_ids: frozenset[SnowflakeId] = frozenset()

    def level_allows(self, actor: Actor, tenant: Tenant, developers: DeveloperAllowlist) -> bool:
        return actor.has_any_role(self.required_role_ids)


OperationPolicy = Annotated[
    Union[DeveloperPolicy, OwnerPolicy, AdminPolicy, ModeratorPolicy, PublicPolicy, CustomPolicy],
    Field(discriminator="level"),
]

operation_policy_adapter: TypeAdapter[OperationPolicy] = TypeAdapter(OperationPolicy)

POLICY_TYPES: dict[PermissionLevel, type[_PolicyBase]] = {
    PermissionLevel.DEVELOPER: DeveloperPolicy,
    PermissionLevel.OWNER: OwnerPolicy,
    PermissionLevel.ADMIN: AdminPolicy,
    PermissionLevel.MODERATOR: ModeratorPolicy,
    PermissionLevel.PUBLIC: PublicPolicy,
    PermissionLevel.CUSTOM: CustomPolicy,
}


def default_policy_for_level(level: PermissionLevel) -> OperationPolicy:
    """Return a policy of the given level with empty lists."""
    return POLICY_TYPES[level]()  # type: ignore[return-value]


class OperationPermissionConfig(BaseModel):
    """Stored override for one operation in one tenant. Unique (tenant_id, operation_name)."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    operation_name: str
    policy: OperationPolicy
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def level(self) -> PermissionLevel:
        return self.policy.permission_level
