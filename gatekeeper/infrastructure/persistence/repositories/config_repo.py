"""Operation permission repository. Implements IConfigStore over SQLAlchemy."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.domain.entities.policy import OperationPermissionConfig, operation_policy_adapter
from gatekeeper.infrastructure.persistence.models.permission import OperationPermissionModel
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _orm_to_config(row: OperationPermissionModel) -> OperationPermissionConfig:
    """Map ORM row to the domain config; fields the level does not use are dropped."""
    raw = row.policy_fields()
    if raw["level"] != "moderator":
        raw.pop("required_capabilities")
        if raw["level"] != "custom":
            raw.pop("required_role_ids")
    return OperationPermissionConfig(
        tenant_id=row.tenant_id,
        operation_name=row.operation_name,
        policy=operation_policy_adapter.validate_python(raw),
        created_by=row.created_by,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _apply(row: OperationPermissionModel, config: OperationPermissionConfig) -> None:
    data = config.policy.model_dump(mode="json")
    row.level = data["level"]
    row.required_capabilities = sorted(data.get("required_capabilities", []))
    row.required_role_ids = sorted(data.get("required_role_ids", []))
    row.allowed_user_ids = sorted(data["allowed_user_ids"])
    row.denied_user_ids = sorted(data["denied_user_ids"])
    row.is_configurable = data["is_configurable"]
    row.updated_at = config.updated_at or utc_now()


class ConfigRepository(BaseRepository[OperationPermissionModel]):
    """Stored operation overrides, one row per (tenant, operation)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, OperationPermissionModel)

    def _where(self, tenant_id: str, operation_name: str) -> tuple:
        return (
            OperationPermissionModel.tenant_id == tenant_id,
            OperationPermissionModel.operation_name == operation_name,
        )

    async def get(self, tenant_id: str, operation_name: str) -> OperationPermissionConfig | None:
        async with self._session_factory() as session:
            row = await self._first(session, *self._where(tenant_id, operation_name))
            return _orm_to_config(row) if row is not None else None

    async def upsert(
        self, tenant_id: str, operation_name: str, config: OperationPermissionConfig
    ) -> OperationPermissionConfig:
        """Insert or update in one transaction; a concurrent insert is retried as an update."""
        try:
            return await self._upsert_once(tenant_id, operation_name, config)
        except IntegrityError:
            logger.debug("Concurrent insert of %s/%s; retrying as update", tenant_id, operation_name)
            return await self._upsert_once(tenant_id, operation_name, config)

    async def _upsert_once(
        self, tenant_id: str, operation_name: str, config: OperationPermissionConfig
    ) -> OperationPermissionConfig:
        async with self._session_factory() as session:
            async with session.begin():
                row = await self._first(session, *self._where(tenant_id, operation_name))
                if row is None:
                    row = OperationPermissionModel(
                        tenant_id=tenant_id,
                        operation_name=operation_name,
                        created_by=config.created_by,
                        created_at=config.created_at or config.updated_at or utc_now(),
                    )
                    session.add(row)
                _apply(row, config)
            return _orm_to_config(row)

    async def delete(self, tenant_id: str, operation_name: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(OperationPermissionModel).where(*self._where(tenant_id, operation_name))
                )
            return (result.rowcount or 0) > 0

    async def list_for_tenant(self, tenant_id: str) -> list[OperationPermissionConfig]:
        async with self._session_factory() as session:
            rows = await self._all(
                session,
                OperationPermissionModel.tenant_id == tenant_id,
                order_by=OperationPermissionModel.operation_name,
            )
            return [_orm_to_config(r) for r in rows]
