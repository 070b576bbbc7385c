"""Custom role repository. Implements IRoleManagementStore over SQLAlchemy."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.domain.entities.role import CustomRole, CustomRoleSummary, RoleAssignment
from gatekeeper.domain.exceptions import DuplicateAssignmentException
from gatekeeper.infrastructure.persistence.models.role import (
    CustomRoleAssignmentModel,
    CustomRoleModel,
)
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc, utc_now


def _orm_to_role(row: CustomRoleModel) -> CustomRole:
    """Map ORM to domain entity."""
    return CustomRole(
        id=row.id,
        tenant_id=row.tenant_id,
        name=row.name,
        permissions=frozenset(row.permissions or ()),
        created_at=ensure_utc(row.created_at),
    )


class RoleRepository(BaseRepository[CustomRoleModel]):
    """Custom roles and their assignments, scoped by tenant."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, CustomRoleModel)

    async def get_assigned_role_ids(self, user_id: str, tenant_id: str) -> set[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CustomRoleAssignmentModel.role_id).where(
                    CustomRoleAssignmentModel.tenant_id == tenant_id,
                    CustomRoleAssignmentModel.user_id == user_id,
                )
            )
            return set(result.scalars().all())

    async def get_roles(self, role_ids: Iterable[str]) -> list[CustomRole]:
        ids = list(role_ids)
        if not ids:
            return []
        async with self._session_factory() as session:
            rows = await self._all(session, CustomRoleModel.id.in_(ids), order_by=CustomRoleModel.name)
            return [_orm_to_role(r) for r in rows]

    async def create_role(self, role: CustomRole) -> CustomRole:
        """Insert role. Raises DuplicateAssignmentException on (tenant, name) conflict."""
        row = CustomRoleModel(
            id=role.id,
            tenant_id=role.tenant_id,
            name=role.name,
            permissions=sorted(role.permissions),
            created_at=role.created_at or utc_now(),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as e:
            raise DuplicateAssignmentException(
                f"Role '{role.name}' already exists", "custom_role", {"role_name": role.name}
            ) from e
        return _orm_to_role(row)

    async def get_role(self, tenant_id: str, role_id: str) -> CustomRole | None:
        async with self._session_factory() as session:
            row = await self._first(
                session, CustomRoleModel.tenant_id == tenant_id, CustomRoleModel.id == role_id
            )
            return _orm_to_role(row) if row is not None else None

    async def get_role_by_name(self, tenant_id: str, name: str) -> CustomRole | None:
        async with self._session_factory() as session:
            row = await self._first(
                session, CustomRoleModel.tenant_id == tenant_id, CustomRoleModel.name == name
            )
            return _orm_to_role(row) if row is not None else None

    async def delete_role(self, tenant_id: str, role_id: str) -> bool:
        """Delete role and its assignments in one transaction."""
        async with self._session_factory() as session:
            async with session.begin():
                # Explicit, since SQLite does not enforce ON DELETE CASCADE by default.
                await session.execute(
                    delete(CustomRoleAssignmentModel).where(
                        CustomRoleAssignmentModel.tenant_id == tenant_id,
                        CustomRoleAssignmentModel.role_id == role_id,
                    )
                )
                result = await session.execute(
                    delete(CustomRoleModel).where(
                        CustomRoleModel.tenant_id == tenant_id, CustomRoleModel.id == role_id
                    )
                )
            return (result.rowcount or 0) > 0

    async def list_roles(self, tenant_id: str) -> list[CustomRoleSummary]:
        counts = (
            select(
                CustomRoleAssignmentModel.role_id,
                func.count(CustomRoleAssignmentModel.id).label("n"),
            )
            .where(CustomRoleAssignmentModel.tenant_id == tenant_id)
            .group_by(CustomRoleAssignmentModel.role_id)
            .subquery()
        )
        stmt = (
            select(CustomRoleModel, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.role_id == CustomRoleModel.id)
            .where(CustomRoleModel.tenant_id == tenant_id)
            .order_by(CustomRoleModel.name)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [
                CustomRoleSummary(role=_orm_to_role(row), assignment_count=int(n))
                for row, n in result.all()
            ]

    async def set_role_permissions(
        self, tenant_id: str, role_id: str, permissions: frozenset[str]
    ) -> CustomRole | None:
        async with self._session_factory() as session:
            async with session.begin():
                row = await self._first(
                    session, CustomRoleModel.tenant_id == tenant_id, CustomRoleModel.id == role_id
                )
                if row is None:
                    return None
                row.permissions = sorted(permissions)
            return _orm_to_role(row)

    async def add_assignment(self, assignment: RoleAssignment) -> bool:
        """Insert assignment; False if (role, user) is already assigned."""
        row = CustomRoleAssignmentModel(
            tenant_id=assignment.tenant_id,
            user_id=assignment.user_id,
            role_id=assignment.role_id,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at or utc_now(),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError:
            return False
        return True

    async def remove_assignment(self, tenant_id: str, user_id: str, role_id: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(CustomRoleAssignmentModel).where(
                        CustomRoleAssignmentModel.tenant_id == tenant_id,
                        CustomRoleAssignmentModel.user_id == user_id,
                        CustomRoleAssignmentModel.role_id == role_id,
                    )
                )
            return (result.rowcount or 0) > 0
