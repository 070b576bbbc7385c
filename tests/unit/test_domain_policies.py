"""Tests for operation policies (tagged variant on level) and the category defaults."""

import pytest
from pydantic import ValidationError

from gatekeeper.domain.entities.policy import (
    AdminPolicy,
    CustomPolicy,
    DeveloperPolicy,
    ModeratorPolicy,
    OwnerPolicy,
    PublicPolicy,
    default_policy_for_level,
    operation_policy_adapter,
)
from gatekeeper.domain.enums import Capability, PermissionLevel
from gatekeeper.domain.value_objects.core import Actor, DeveloperAllowlist, Tenant

DEVS = DeveloperAllowlist.from_csv("9")
TENANT = Tenant("100", owner_id="7")


def test_adapter_selects_variant_by_level() -> None:
    policy = operation_policy_adapter.validate_python(
        {"level": "moderator", "required_capabilities": [int(Capability.KICK_MEMBERS)]}
    )
    assert isinstance(policy, ModeratorPolicy)
    assert policy.permission_level is PermissionLevel.MODERATOR
    assert policy.required_capabilities == frozenset({int(Capability.KICK_MEMBERS)})


def test_fields_of_other_levels_are_rejected() -> None:
    with pytest.raises(ValidationError):
        operation_policy_adapter.validate_python({"level": "public", "required_role_ids": ["1"]})


def test_unknown_level_rejected() -> None:
    with pytest.raises(ValidationError):
        operation_policy_adapter.validate_python({"level": "superuser"})


def test_capability_must_be_single_bit() -> None:
    with pytest.raises(ValidationError):
        ModeratorPolicy(required_capabilities=frozenset({6}))
    with pytest.raises(ValidationError):
        ModeratorPolicy(required_capabilities=frozenset({0}))


def test_user_ids_must_be_snowflakes() -> None:
    with pytest.raises(ValidationError):
        PublicPolicy(allowed_user_ids=frozenset({"bob"}))


def test_json_round_trip_keeps_variant() -> None:
    policy = CustomPolicy(required_role_ids=frozenset({"42"}), denied_user_ids=frozenset({"5"}))
    restored = operation_policy_adapter.validate_json(operation_policy_adapter.dump_json(policy))
    assert restored == policy


class TestLevelAllows:
    def test_developer(self) -> None:
        assert DeveloperPolicy().level_allows(Actor("9"), TENANT, DEVS)
        assert not DeveloperPolicy().level_allows(Actor("1"), TENANT, DEVS)

    def test_owner(self) -> None:
        assert OwnerPolicy().level_allows(Actor("7"), TENANT, DEVS)
        assert not OwnerPolicy().level_allows(
            Actor("1", permissions=int(Capability.ADMINISTRATOR)), TENANT, DEVS
        )

    def test_admin(self) -> None:
        assert AdminPolicy().level_allows(
            Actor("1", permissions=int(Capability.ADMINISTRATOR)), TENANT, DEVS
        )
        assert not AdminPolicy().level_allows(
            Actor("1", permissions=int(Capability.MANAGE_GUILD)), TENANT, DEVS
        )

    def test_moderator_capability_or_role(self) -> None:
        policy = ModeratorPolicy(
            required_capabilities=frozenset({int(Capability.KICK_MEMBERS)}),
            required_role_ids=frozenset({"50"}),
        )
        assert policy.level_allows(Actor("1", permissions=int(Capability.KICK_MEMBERS)), TENANT, DEVS)
        assert policy.level_allows(Actor("1", role_ids=frozenset({"50"})), TENANT, DEVS)
        assert not policy.level_allows(Actor("1"), TENANT, DEVS)

    def test_moderator_without_requirements_admits_nobody(self) -> None:
        assert not ModeratorPolicy().level_allows(Actor("1"), TENANT, DEVS)

    def test_public(self) -> None:
        assert PublicPolicy().level_allows(Actor("1"), TENANT, DEVS)

    def test_custom(self) -> None:
        policy = CustomPolicy(required_role_ids=frozenset({"50"}))
        assert policy.level_allows(Actor("1", role_ids=frozenset({"50"})), TENANT, DEVS)
        assert not policy.level_allows(Actor("1", role_ids=frozenset({"51"})), TENANT, DEVS)


def test_default_policy_for_level() -> None:
    for level in PermissionLevel:
        policy = default_policy_for_level(level)
        assert policy.permission_level is level
        assert policy.allowed_user_ids == frozenset()
        assert policy.is_configurable
