"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Only used when database_backend is 'sql'. Schema is created with
create_all() at startup when database_auto_create is set; otherwise the
tables are expected to exist.

Engine and session factory are created lazily on first use (ensure_engine)
so import does not trigger Settings validation.
"""

import logging
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from gatekeeper.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Portable JSON column; JSONB on PostgreSQL.
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Set by ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build an AsyncEngine for settings.database_url.

    Pool sizing applies to server databases only; SQLite uses its own pool.
    """
    kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size if settings.db_pool_size is not None else 20,
            max_overflow=settings.db_max_overflow if settings.db_max_overflow is not None else 30,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def ensure_engine(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Create engine and AsyncSessionLocal on first use; return the session factory."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return AsyncSessionLocal
    settings = settings or get_settings()
    engine = create_engine_from_settings(settings)
    AsyncSessionLocal = make_session_factory(engine)
    logger.info("SQL engine created (%s)", engine.url.get_backend_name())
    return AsyncSessionLocal


async def create_all(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Register models on Base.metadata.
    from gatekeeper.infrastructure.persistence import models  # noqa: F401

    target = bind or engine
    if target is None:
        raise RuntimeError("Engine not initialized; call ensure_engine() first")
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the lazily created engine (app shutdown)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None
