"""Best-effort writer and reader for the permission audit log.

A failed audit write must never fail the operation that triggered it: append
logs and swallows. Denies on the decision path are recorded in the background
so a slow audit store cannot delay the check.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from gatekeeper.application.interfaces.repositories import IAuditLog
from gatekeeper.application.interfaces.services import IClock
from gatekeeper.application.services.bounded import call_store
from gatekeeper.domain.entities.audit import AuditEntry
from gatekeeper.domain.enums import AuditAction

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Appends AuditEntry records and serves newest-first queries."""

    def __init__(
        self,
        audit_log: IAuditLog,
        clock: IClock,
        default_limit: int = 50,
        max_limit: int = 100,
        timeout: float = 1.0,
        query_timeout: float = 0.25,
    ) -> None:
        self._log = audit_log
        self._clock = clock
        self.default_limit = default_limit
        self.max_limit = max_limit
        self._timeout = timeout
        self._query_timeout = query_timeout
        self._pending: set[asyncio.Task[None]] = set()

    async def append(self, entry: AuditEntry) -> None:
        """Persist entry; on any failure log a warning and return normally."""
        try:
            async with asyncio.timeout(self._timeout):
                await self._log.append(entry)
        except Exception as e:
            logger.warning(
                "Audit write failed (tenant=%s action=%s operation=%s): %s",
                entry.tenant_id,
                entry.action.value,
                entry.operation_name,
                str(e) or type(e).__name__,
            )

    def build_entry(
        self,
        tenant_id: str,
        action: AuditAction,
        actor_id: str,
        operation_name: str | None = None,
        old_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> AuditEntry:
        return AuditEntry(
            tenant_id=tenant_id,
            action=action,
            actor_id=actor_id,
            timestamp=self._clock.now(),
            operation_name=operation_name,
            old_value=old_value,
            new_value=new_value,
            reason=reason,
        )

    async def record(self, tenant_id: str, action: AuditAction, actor_id: str, **fields: Any) -> None:
        """Build an entry stamped with the clock and append it."""
        await self.append(self.build_entry(tenant_id, action, actor_id, **fields))

    def record_in_background(
        self, tenant_id: str, action: AuditAction, actor_id: str, **fields: Any
    ) -> None:
        """Schedule record() without awaiting it. The timestamp is taken now."""
        entry = self.build_entry(tenant_id, action, actor_id, **fields)
        task = asyncio.create_task(self.append(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for background writes scheduled so far (shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clamp_limit(self, limit: int | None) -> int:
        """Return limit bounded to [1, max_limit]; None selects default_limit."""
        if limit is None:
            return self.default_limit
        return max(1, min(limit, self.max_limit))

    async def query(
        self, tenant_id: str, limit: int | None = None, operation_name: str | None = None
    ) -> list[AuditEntry]:
        """Return at most limit entries for tenant, newest first. Not a cursor.

        Raises:
            PersistenceException: If the audit store is unreachable.
        """
        bounded = self.clamp_limit(limit)
        entries = await call_store(
            self._log.query(tenant_id, bounded, operation_name),
            self._query_timeout,
            "audit_log.query",
        )
        return entries[:bounded]
