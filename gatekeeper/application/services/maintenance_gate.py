"""Tenant-wide lockdown: while enabled only allowlisted actors may run operations."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from gatekeeper.application.interfaces.repositories import IMaintenanceStore
from gatekeeper.application.interfaces.services import IClock
from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.bounded import call_store
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.application.services.validators import require_snowflake
from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.domain.enums import AuditAction

logger = logging.getLogger(__name__)

REASON_MAX_LENGTH = 500


def _snapshot(state: MaintenanceState | None) -> dict[str, Any] | None:
    if state is None:
        return None
    return {
        "enabled": state.enabled,
        "enabled_by": state.enabled_by,
        "enabled_at": state.enabled_at.isoformat(),
        "allowed_user_ids": sorted(state.allowed_user_ids),
        "reason": state.reason,
    }


class MaintenanceGate:
    """First step of every permission check, and the enable/disable switch."""

    def __init__(
        self,
        store: IMaintenanceStore,
        policy_cache: PolicyCache,
        audit: AuditRecorder,
        clock: IClock,
        store_timeout: float = 0.25,
    ) -> None:
        self._store = store
        self._cache = policy_cache
        self._audit = audit
        self._clock = clock
        self._store_timeout = store_timeout

    async def is_blocked(self, tenant_id: str, user_id: str) -> bool:
        """Return True if tenant is in maintenance and user is not allowlisted."""
        state = await self._cache.get_maintenance(tenant_id)
        return state is not None and state.blocks(user_id)

    async def status(self, tenant_id: str) -> MaintenanceState | None:
        """Return the stored maintenance state (read through, not cached)."""
        return await call_store(
            self._store.get(tenant_id), self._store_timeout, "maintenance_store.get"
        )

    async def enable(
        self, tenant_id: str, reason: str | None, actor_id: str
    ) -> MaintenanceState:
        """Put tenant in maintenance with actor_id allowlisted.

        Re-enabling keeps the current allowlist and adds the new enabler; the
        reason and enabled_by/enabled_at are replaced.
        """
        require_snowflake(tenant_id, "tenant_id")
        require_snowflake(actor_id, "actor_id")
        reason = (reason or "").strip()[:REASON_MAX_LENGTH] or None

        existing = await self.status(tenant_id)
        allowed = {actor_id}
        if existing is not None and existing.enabled:
            allowed |= existing.allowed_user_ids
        state = MaintenanceState(
            tenant_id=tenant_id,
            enabled=True,
            enabled_by=actor_id,
            enabled_at=self._clock.now(),
            allowed_user_ids=frozenset(allowed),
            reason=reason,
        )
        stored = await call_store(
            self._store.upsert(tenant_id, state), self._store_timeout, "maintenance_store.upsert"
        )
        await self._cache.invalidate_tenant(tenant_id)
        logger.info("Maintenance enabled for tenant %s by %s", tenant_id, actor_id)
        await self._audit.record(
            tenant_id,
            AuditAction.MAINTENANCE_ENABLED,
            actor_id,
            old_value=_snapshot(existing),
            new_value=_snapshot(stored),
            reason=reason,
        )
        return stored

    async def allow_user(self, tenant_id: str, user_id: str, actor_id: str) -> MaintenanceState | None:
        """Add user_id to the allowlist of an active lockdown. None if not in maintenance."""
        require_snowflake(user_id, "user_id")
        existing = await self.status(tenant_id)
        if existing is None or not existing.enabled:
            return None
        if user_id in existing.allowed_user_ids:
            return existing
        state = replace(existing, allowed_user_ids=existing.allowed_user_ids | {user_id})
        stored = await call_store(
            self._store.upsert(tenant_id, state), self._store_timeout, "maintenance_store.upsert"
        )
        await self._cache.invalidate_tenant(tenant_id)
        await self._audit.record(
            tenant_id,
            AuditAction.MAINTENANCE_ENABLED,
            actor_id,
            old_value=_snapshot(existing),
            new_value=_snapshot(stored),
            reason=existing.reason,
        )
        return stored

    async def disable(self, tenant_id: str, actor_id: str) -> bool:
        """Lift maintenance. Return False if the tenant was not in maintenance.

        The change is audited either way.
        """
        require_snowflake(tenant_id, "tenant_id")
        require_snowflake(actor_id, "actor_id")
        existing = await self.status(tenant_id)
        removed = await call_store(
            self._store.delete(tenant_id), self._store_timeout, "maintenance_store.delete"
        )
        await self._cache.invalidate_tenant(tenant_id)
        logger.info("Maintenance disabled for tenant %s by %s", tenant_id, actor_id)
        await self._audit.record(
            tenant_id,
            AuditAction.MAINTENANCE_DISABLED,
            actor_id,
            old_value=_snapshot(existing),
        )
        return removed
