"""Validated writes to per-tenant operation configs, with audit and cache invalidation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from gatekeeper.application.dtos.permission import BulkUpdateResult
from gatekeeper.application.interfaces.repositories import IConfigStore
from gatekeeper.application.interfaces.services import IClock
from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.bounded import call_store
from gatekeeper.application.services.operation_registry import OperationRegistry
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.core.constants import CACHE_KIND_CONFIG
from gatekeeper.domain.entities.policy import (
    POLICY_TYPES,
    OperationPermissionConfig,
    OperationPolicy,
    operation_policy_adapter,
)
from gatekeeper.domain.enums import AuditAction, OperationCategory, PermissionLevel
from gatekeeper.domain.exceptions import (
    ConfigValidationException,
    OperationNotConfigurableException,
)
from gatekeeper.domain.value_objects.core import is_snowflake, is_valid_operation_name

logger = logging.getLogger(__name__)

_TAG_ERRORS = frozenset({"union_tag_not_found", "union_tag_invalid"})


def _field_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into {field, message} pairs.

    The variant tag pydantic puts first in loc is dropped, so a bad entry in
    a moderator policy reports "required_capabilities.0", not
    "moderator.required_capabilities.0".
    """
    errors: list[dict[str, str]] = []
    levels = set(PermissionLevel.values())
    for err in exc.errors():
        if err["type"] in _TAG_ERRORS:
            errors.append({"field": "level", "message": err["msg"]})
            continue
        loc = list(err["loc"])
        if loc and loc[0] in levels:
            loc = loc[1:]
        errors.append({"field": ".".join(str(p) for p in loc) or "config", "message": err["msg"]})
    return errors


def parse_policy(new_config: OperationPolicy | Mapping[str, Any]) -> OperationPolicy:
    """Validate a raw config (or pass through a policy instance).

    Raises:
        ConfigValidationException: Listing every invalid field.
    """
    if isinstance(new_config, tuple(POLICY_TYPES.values())):
        return new_config
    if not isinstance(new_config, Mapping):
        raise ConfigValidationException([{"field": "config", "message": "must be an object"}])
    data = dict(new_config)
    if isinstance(data.get("level"), str):
        data["level"] = data["level"].strip().lower()
    try:
        return operation_policy_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigValidationException(_field_errors(e)) from e


def _check_keys(tenant_id: str, operation_name: str | None, actor_id: str) -> None:
    errors = []
    if not is_snowflake(tenant_id):
        errors.append({"field": "tenant_id", "message": "must be a numeric platform id"})
    if operation_name is not None and not is_valid_operation_name(operation_name):
        errors.append({"field": "operation_name", "message": "invalid operation name"})
    if not is_snowflake(actor_id):
        errors.append({"field": "actor_id", "message": "must be a numeric platform id"})
    if errors:
        raise ConfigValidationException(errors)


def _dump(config: OperationPermissionConfig | None) -> dict[str, Any] | None:
    if config is None:
        return None
    return config.policy.model_dump(mode="json")


class ConfigMutator:
    """The only writer of operation configs.

    Every successful write invalidates the cached entry before returning and
    appends an audit record; invalid input is rejected before either.
    """

    def __init__(
        self,
        config_store: IConfigStore,
        policy_cache: PolicyCache,
        audit: AuditRecorder,
        registry: OperationRegistry,
        clock: IClock,
        store_timeout: float = 0.25,
    ) -> None:
        self._store = config_store
        self._cache = policy_cache
        self._audit = audit
        self._registry = registry
        self._clock = clock
        self._store_timeout = store_timeout

    async def _get_existing(self, tenant_id: str, operation_name: str) -> OperationPermissionConfig | None:
        existing = await call_store(
            self._store.get(tenant_id, operation_name), self._store_timeout, "config_store.get"
        )
        if not self._registry.is_configurable(operation_name) or (
            existing is not None and not existing.policy.is_configurable
        ):
            raise OperationNotConfigurableException(tenant_id, operation_name)
        return existing

    async def set_operation_config(
        self,
        tenant_id: str,
        operation_name: str,
        new_config: OperationPolicy | Mapping[str, Any],
        actor_id: str,
    ) -> OperationPermissionConfig:
        """Replace the tenant's override for operation_name.

        Not deduplicated: an identical repeat still writes and is audited.

        Raises:
            ConfigValidationException: If the config or keys are malformed.
            OperationNotConfigurableException: If the operation is locked.
            PersistenceException: If the store is unreachable.
        """
        _check_keys(tenant_id, operation_name, actor_id)
        policy = parse_policy(new_config)
        return await self._write(tenant_id, operation_name, policy, actor_id)

    async def _write(
        self, tenant_id: str, operation_name: str, policy: OperationPolicy, actor_id: str
    ) -> OperationPermissionConfig:
        existing = await self._get_existing(tenant_id, operation_name)
        now = self._clock.now()
        config = OperationPermissionConfig(
            tenant_id=tenant_id,
            operation_name=operation_name,
            policy=policy,
            created_by=existing.created_by if existing else actor_id,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        stored = await call_store(
            self._store.upsert(tenant_id, operation_name, config),
            self._store_timeout,
            "config_store.upsert",
        )
        await self._cache.invalidate(CACHE_KIND_CONFIG, tenant_id, operation_name)
        logger.info(
            "Operation %s in tenant %s set to %s by %s",
            operation_name,
            tenant_id,
            stored.level.value,
            actor_id,
        )
        await self._audit.record(
            tenant_id,
            AuditAction.UPDATE,
            actor_id,
            operation_name=operation_name,
            old_value=_dump(existing),
            new_value=_dump(stored),
        )
        return stored

    async def reset_operation_config(self, tenant_id: str, operation_name: str, actor_id: str) -> bool:
        """Delete the override so the default policy applies again.

        Returns False (and writes no audit entry) if there was no override;
        the cache is invalidated either way.

        Raises:
            ConfigValidationException: If the keys are malformed.
            OperationNotConfigurableException: If the operation is locked.
        """
        _check_keys(tenant_id, operation_name, actor_id)
        existing = await self._get_existing(tenant_id, operation_name)
        removed = False
        if existing is not None:
            removed = await call_store(
                self._store.delete(tenant_id, operation_name),
                self._store_timeout,
                "config_store.delete",
            )
        await self._cache.invalidate(CACHE_KIND_CONFIG, tenant_id, operation_name)
        if existing is not None:
            logger.info(
                "Operation %s in tenant %s reset to default by %s", operation_name, tenant_id, actor_id
            )
            await self._audit.record(
                tenant_id,
                AuditAction.DELETE,
                actor_id,
                operation_name=operation_name,
                old_value=_dump(existing),
            )
        return removed

    async def bulk_set_operation_config(
        self,
        tenant_id: str,
        operation_names: Iterable[str],
        new_config: OperationPolicy | Mapping[str, Any],
        actor_id: str,
    ) -> BulkUpdateResult:
        """Apply one config to several operations; locked ones are skipped.

        The config and every name are validated before anything is written.
        """
        names = list(dict.fromkeys(operation_names))
        errors = [
            {"field": f"operation_names.{i}", "message": "invalid operation name"}
            for i, name in enumerate(names)
            if not is_valid_operation_name(name)
        ]
        if errors:
            raise ConfigValidationException(errors)
        _check_keys(tenant_id, None, actor_id)
        policy = parse_policy(new_config)

        result = BulkUpdateResult()
        for name in names:
            try:
                await self._write(tenant_id, name, policy, actor_id)
            except OperationNotConfigurableException:
                result.not_configurable.append(name)
            else:
                result.updated.append(name)
        return result

    async def bulk_set_category(
        self,
        tenant_id: str,
        category: OperationCategory | str,
        new_config: OperationPolicy | Mapping[str, Any],
        actor_id: str,
    ) -> BulkUpdateResult:
        """Apply one config to every registered operation of a category."""
        try:
            wanted = OperationCategory(category)
        except ValueError as e:
            raise ConfigValidationException(
                [{"field": "category", "message": f"unknown category {category!r}"}]
            ) from e
        return await self.bulk_set_operation_config(
            tenant_id, self._registry.operations_in(wanted), new_config, actor_id
        )
