"""Maintenance mode repository. Implements IMaintenanceStore over SQLAlchemy."""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.infrastructure.persistence.models.maintenance import MaintenanceModeModel
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc


def _orm_to_state(row: MaintenanceModeModel) -> MaintenanceState:
    return MaintenanceState(
        tenant_id=row.tenant_id,
        enabled=row.enabled,
        enabled_by=row.enabled_by,
        enabled_at=ensure_utc(row.enabled_at),
        allowed_user_ids=frozenset(row.allowed_user_ids or ()),
        reason=row.reason,
    )


class MaintenanceRepository(BaseRepository[MaintenanceModeModel]):
    """One maintenance row per tenant; absence means not in maintenance."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, MaintenanceModeModel)

    async def get(self, tenant_id: str) -> MaintenanceState | None:
        async with self._session_factory() as session:
            row = await session.get(MaintenanceModeModel, tenant_id)
            return _orm_to_state(row) if row is not None else None

    async def upsert(self, tenant_id: str, state: MaintenanceState) -> MaintenanceState:
        try:
            return await self._upsert_once(tenant_id, state)
        except IntegrityError:
            return await self._upsert_once(tenant_id, state)

    async def _upsert_once(self, tenant_id: str, state: MaintenanceState) -> MaintenanceState:
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(MaintenanceModeModel, tenant_id)
                if row is None:
                    row = MaintenanceModeModel(tenant_id=tenant_id)
                    session.add(row)
                row.enabled = state.enabled
                row.enabled_by = state.enabled_by
                row.enabled_at = state.enabled_at
                row.allowed_user_ids = sorted(state.allowed_user_ids)
                row.reason = state.reason
            return _orm_to_state(row)

    async def delete(self, tenant_id: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(MaintenanceModeModel).where(MaintenanceModeModel.tenant_id == tenant_id)
                )
            return (result.rowcount or 0) > 0
