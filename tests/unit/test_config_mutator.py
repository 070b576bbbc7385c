"""ConfigMutator tests: validation, audit trail, locks, bulk updates."""

from unittest.mock import AsyncMock

import pytest

from gatekeeper.application.services.config_mutator import parse_policy
from gatekeeper.core.composition import PermissionServices, build_services, memory_stores
from gatekeeper.domain.entities.policy import AdminPolicy, OperationPermissionConfig
from gatekeeper.domain.enums import AuditAction, Capability, PermissionLevel
from gatekeeper.domain.exceptions import (
    ConfigValidationException,
    OperationNotConfigurableException,
    PersistenceException,
)
from tests.conftest import MEMBER_ID, OWNER_ID, TENANT_ID, FakeClock, make_settings


async def _audit(services: PermissionServices, operation_name: str | None = None):
    return await services.audit.query(TENANT_ID, operation_name=operation_name)


class TestParsePolicy:
    def test_level_is_case_insensitive(self) -> None:
        assert parse_policy({"level": " Admin "}).permission_level is PermissionLevel.ADMIN

    def test_policy_instance_passes_through(self) -> None:
        policy = AdminPolicy()
        assert parse_policy(policy) is policy

    def test_other_model_is_rejected(self) -> None:
        config = OperationPermissionConfig(
            tenant_id=TENANT_ID, operation_name="ping", policy=AdminPolicy()
        )
        with pytest.raises(ConfigValidationException) as exc_info:
            parse_policy(config)
        assert exc_info.value.fields == ["config"]

    def test_missing_level(self) -> None:
        with pytest.raises(ConfigValidationException) as exc_info:
            parse_policy({"allowed_user_ids": ["1"]})
        assert exc_info.value.fields == ["level"]

    def test_unknown_level(self) -> None:
        with pytest.raises(ConfigValidationException) as exc_info:
            parse_policy({"level": "root"})
        assert exc_info.value.fields == ["level"]

    def test_reports_every_invalid_field_without_level_prefix(self) -> None:
        with pytest.raises(ConfigValidationException) as exc_info:
            parse_policy(
                {
                    "level": "moderator",
                    "required_capabilities": [3],
                    "denied_user_ids": ["not-an-id"],
                }
            )
        fields = exc_info.value.fields
        assert any(f.startswith("required_capabilities") for f in fields)
        assert any(f.startswith("denied_user_ids") for f in fields)
        assert not any(f.startswith("moderator") for f in fields)

    def test_not_an_object(self) -> None:
        with pytest.raises(ConfigValidationException):
            parse_policy(["admin"])


async def test_set_persists_and_audits(services: PermissionServices, clock: FakeClock) -> None:
    config = await services.mutator.set_operation_config(
        TENANT_ID, "ban", {"level": "public", "allowed_user_ids": [MEMBER_ID]}, OWNER_ID
    )
    assert config.level is PermissionLevel.PUBLIC
    assert config.created_by == OWNER_ID
    assert config.created_at == clock.now()
    assert await services.stores.config.get(TENANT_ID, "ban") == config

    entries = await _audit(services, "ban")
    assert len(entries) == 1
    assert entries[0].action is AuditAction.UPDATE
    assert entries[0].old_value is None
    assert entries[0].new_value["level"] == "public"
    assert entries[0].actor_id == OWNER_ID


async def test_update_keeps_creation_metadata(services: PermissionServices, clock: FakeClock) -> None:
    first = await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "public"}, OWNER_ID)
    clock.advance(60)
    second = await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "owner"}, MEMBER_ID)
    assert second.created_by == OWNER_ID
    assert second.created_at == first.created_at
    assert second.updated_at == clock.now()

    latest = (await _audit(services, "ban"))[0]
    assert latest.old_value["level"] == "public"
    assert latest.new_value["level"] == "owner"


async def test_identical_sets_are_both_audited(services: PermissionServices) -> None:
    payload = {"level": "admin", "denied_user_ids": [MEMBER_ID]}
    await services.mutator.set_operation_config(TENANT_ID, "ban", payload, OWNER_ID)
    await services.mutator.set_operation_config(TENANT_ID, "ban", payload, OWNER_ID)
    assert len(await _audit(services, "ban")) == 2
    stored = await services.stores.config.get(TENANT_ID, "ban")
    assert stored.policy.denied_user_ids == frozenset({MEMBER_ID})


async def test_invalid_config_persists_nothing(services: PermissionServices) -> None:
    with pytest.raises(ConfigValidationException):
        await services.mutator.set_operation_config(
            TENANT_ID, "ban", {"level": "custom", "required_role_ids": ["x"]}, OWNER_ID
        )
    assert await services.stores.config.get(TENANT_ID, "ban") is None
    assert await _audit(services) == []


async def test_invalid_keys_rejected(services: PermissionServices) -> None:
    with pytest.raises(ConfigValidationException) as exc_info:
        await services.mutator.set_operation_config("guild", "Bad Name", {"level": "admin"}, "me")
    assert exc_info.value.fields == ["tenant_id", "operation_name", "actor_id"]


async def test_reset(services: PermissionServices) -> None:
    await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "public"}, OWNER_ID)
    assert await services.mutator.reset_operation_config(TENANT_ID, "ban", OWNER_ID) is True
    assert await services.stores.config.get(TENANT_ID, "ban") is None

    entries = await _audit(services, "ban")
    assert [e.action for e in entries] == [AuditAction.DELETE, AuditAction.UPDATE]
    assert entries[0].old_value["level"] == "public"


async def test_reset_without_override_is_a_quiet_no_op(services: PermissionServices) -> None:
    assert await services.mutator.reset_operation_config(TENANT_ID, "ban", OWNER_ID) is False
    assert await _audit(services) == []


async def test_stored_lock_rejects_changes(services: PermissionServices) -> None:
    locked = OperationPermissionConfig(
        tenant_id=TENANT_ID, operation_name="ban", policy=AdminPolicy(is_configurable=False)
    )
    await services.stores.config.upsert(TENANT_ID, "ban", locked)
    with pytest.raises(OperationNotConfigurableException):
        await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "public"}, OWNER_ID)
    with pytest.raises(OperationNotConfigurableException):
        await services.mutator.reset_operation_config(TENANT_ID, "ban", OWNER_ID)
    assert await services.stores.config.get(TENANT_ID, "ban") == locked
    assert await _audit(services) == []


async def test_registry_lock_rejects_changes(clock: FakeClock) -> None:
    services = build_services(make_settings(), memory_stores(), clock=clock)
    services.registry.register("eval", "dev", configurable=False)
    with pytest.raises(OperationNotConfigurableException):
        await services.mutator.set_operation_config(TENANT_ID, "eval", {"level": "public"}, OWNER_ID)


async def test_store_failure_surfaces(services: PermissionServices) -> None:
    services.stores.config.upsert = AsyncMock(side_effect=OSError("disk full"))
    with pytest.raises(PersistenceException):
        await services.mutator.set_operation_config(TENANT_ID, "ban", {"level": "public"}, OWNER_ID)
    assert await _audit(services) == []


class TestBulk:
    async def test_bulk_set_skips_locked(self, services: PermissionServices) -> None:
        services.registry.register("eval", "dev", configurable=False)
        result = await services.mutator.bulk_set_operation_config(
            TENANT_ID, ["ban", "eval", "ping", "ban"], {"level": "owner"}, OWNER_ID
        )
        assert result.updated == ["ban", "ping"]
        assert result.not_configurable == ["eval"]
        assert len(await _audit(services)) == 2

    async def test_bulk_set_validates_everything_first(self, services: PermissionServices) -> None:
        with pytest.raises(ConfigValidationException) as exc_info:
            await services.mutator.bulk_set_operation_config(
                TENANT_ID, ["ban", "Not Valid"], {"level": "owner"}, OWNER_ID
            )
        assert exc_info.value.fields == ["operation_names.1"]
        assert await services.stores.config.list_for_tenant(TENANT_ID) == []

    async def test_bulk_set_category(self, services: PermissionServices) -> None:
        result = await services.mutator.bulk_set_category(
            TENANT_ID,
            "economy",
            {"level": "moderator", "required_capabilities": [int(Capability.MANAGE_GUILD)]},
            OWNER_ID,
        )
        assert result.updated == ["economy.daily", "economy.pay"]
        stored = await services.stores.config.list_for_tenant(TENANT_ID)
        assert [c.operation_name for c in stored] == ["economy.daily", "economy.pay"]

    async def test_unknown_category(self, services: PermissionServices) -> None:
        with pytest.raises(ConfigValidationException) as exc_info:
            await services.mutator.bulk_set_category(TENANT_ID, "cooking", {"level": "admin"}, OWNER_ID)
        assert exc_info.value.fields == ["category"]
