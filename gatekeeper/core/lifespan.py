"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (stores, Redis
cache, audit drain, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from gatekeeper.core.composition import build_services, memory_stores, sql_stores
from gatekeeper.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: stores (SQL engine + optional create_all, or in-memory),
    Redis cache (if enabled), services. Shutdown order: drain pending audit
    writes, cache disconnect, SQL engine dispose.

    If app.state.services is already set (tests, embedding hosts), startup
    and shutdown leave it alone.
    """
    if getattr(app.state, "services", None) is not None:
        yield
        return

    settings = get_settings()

    # ---- Startup ----
    if settings.database_backend == "sql":
        from gatekeeper.infrastructure.persistence import database

        session_factory = database.ensure_engine(settings)
        if settings.database_auto_create:
            await database.create_all()
            logger.info("Database tables ensured")
        stores = sql_stores(session_factory)
    else:
        logger.warning("Using in-memory stores; permission data is lost on restart")
        stores = memory_stores()

    cache = None
    if settings.redis_enabled:
        from gatekeeper.infrastructure.cache.redis_cache import RedisCache

        cache = RedisCache(settings=settings)
        await cache.connect()

    app.state.services = build_services(settings, stores, cache=cache)

    yield

    # ---- Shutdown ----
    services = app.state.services
    await services.audit.drain()
    logger.info("Pending audit writes flushed")

    if cache is not None:
        await cache.disconnect()
        logger.info("Cache disconnected")

    if settings.database_backend == "sql":
        from gatekeeper.infrastructure.persistence import database

        await database.dispose_engine()

    app.state.services = None
