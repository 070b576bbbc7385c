"""Base repository: session handling and single-row lookups shared by the SQL stores.

Stores are long-lived (built once at startup) and open one short session
per call from the injected async_sessionmaker, so they are safe to share
across concurrent permission checks.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository bound to one ORM model and a session factory."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], model: type[ModelType]
    ) -> None:
        self._session_factory = session_factory
        self.model = model

    async def _first(self, session: AsyncSession, *conditions: Any) -> ModelType | None:
        """Return the single row matching all conditions, or None."""
        result = await session.execute(select(self.model).where(and_(*conditions)))
        return result.scalar_one_or_none()

    async def _all(self, session: AsyncSession, *conditions: Any, order_by: Any = None) -> list[ModelType]:
        stmt = select(self.model).where(and_(*conditions))
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await session.execute(stmt)
        return list(result.scalars().all())
