"""Permission audit log repository. Append-only; implements IAuditLog."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.domain.entities.audit import AuditEntry
from gatekeeper.domain.enums import AuditAction
from gatekeeper.infrastructure.persistence.models.audit_log import PermissionAuditLogModel
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc
from gatekeeper.shared.utils.generators import generate_cuid


def _orm_to_entry(row: PermissionAuditLogModel) -> AuditEntry:
    """Map ORM to domain entry."""
    return AuditEntry(
        id=row.id,
        tenant_id=row.tenant_id,
        operation_name=row.operation_name,
        action=AuditAction(row.action),
        old_value=row.old_value,
        new_value=row.new_value,
        actor_id=row.actor_id,
        reason=row.reason,
        timestamp=ensure_utc(row.timestamp),
    )


class AuditLogRepository(BaseRepository[PermissionAuditLogModel]):
    """Append-only audit log repository. No update/delete."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, PermissionAuditLogModel)

    async def append(self, entry: AuditEntry) -> AuditEntry:
        """Append one audit entry; return it with its id."""
        entry_id = entry.id or generate_cuid()
        row = PermissionAuditLogModel(
            id=entry_id,
            tenant_id=entry.tenant_id,
            operation_name=entry.operation_name,
            action=entry.action.value,
            old_value=entry.old_value,
            new_value=entry.new_value,
            actor_id=entry.actor_id,
            reason=entry.reason,
            timestamp=entry.timestamp,
        )
        async with self._session_factory() as session:
            async with session.begin():
                session.add(row)
        return replace(entry, id=entry_id)

    async def query(
        self, tenant_id: str, limit: int, operation_name: str | None = None
    ) -> list[AuditEntry]:
        """Return at most limit entries for tenant (newest first)."""
        conditions = [PermissionAuditLogModel.tenant_id == tenant_id]
        if operation_name is not None:
            conditions.append(PermissionAuditLogModel.operation_name == operation_name)
        stmt = (
            select(PermissionAuditLogModel)
            .where(*conditions)
            .order_by(PermissionAuditLogModel.timestamp.desc(), PermissionAuditLogModel.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_orm_to_entry(r) for r in result.scalars().all()]
