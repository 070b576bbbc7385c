"""Tests for OperationRegistry (category defaults and edit locks)."""

from gatekeeper.application.services.operation_registry import OperationRegistry, level_for_category
from gatekeeper.domain.entities.policy import AdminPolicy, DeveloperPolicy, PublicPolicy
from gatekeeper.domain.enums import OperationCategory, PermissionLevel


def test_level_for_category() -> None:
    assert level_for_category(OperationCategory.ADMIN) is PermissionLevel.ADMIN
    assert level_for_category(OperationCategory.CONTEXT) is PermissionLevel.ADMIN
    assert level_for_category(OperationCategory.MESSAGE) is PermissionLevel.ADMIN
    assert level_for_category(OperationCategory.DEV) is PermissionLevel.DEVELOPER
    assert level_for_category(OperationCategory.FUN) is PermissionLevel.PUBLIC
    assert level_for_category(None) is PermissionLevel.ADMIN


def test_default_policies() -> None:
    registry = OperationRegistry({"ban": "admin", "eval": "dev", "ping": "general"})
    assert isinstance(registry.default_policy("ban"), AdminPolicy)
    assert isinstance(registry.default_policy("eval"), DeveloperPolicy)
    assert isinstance(registry.default_policy("ping"), PublicPolicy)
    assert isinstance(registry.default_policy("unknown"), AdminPolicy)


def test_register_and_lookup() -> None:
    registry = OperationRegistry()
    registry.register("ping", "utility")
    registry.register("ping", OperationCategory.FUN)
    assert len(registry) == 1
    assert "ping" in registry
    assert registry.category_of("ping") is OperationCategory.FUN
    assert registry.get("pong") is None


def test_operations_in_category_sorted() -> None:
    registry = OperationRegistry(
        {"economy.pay": "economy", "economy.daily": "economy", "ping": "general"}
    )
    assert registry.operations_in("economy") == ["economy.daily", "economy.pay"]
    assert registry.operations_in(OperationCategory.FUN) == []
    assert [op.name for op in registry] == ["economy.daily", "economy.pay", "ping"]


def test_locked_operations() -> None:
    registry = OperationRegistry({"eval": "dev", "ping": "general"}, locked=["eval"])
    assert not registry.is_configurable("eval")
    assert registry.is_configurable("ping")
    assert registry.is_configurable("unregistered")
