"""Bounded awaits for store and cache calls.

Every await on a store or on the distributed cache goes through one of these
helpers so a slow backend can never stall a permission check.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from gatekeeper.domain.exceptions import (
    CacheUnavailableException,
    GatekeeperException,
    PersistenceException,
)

T = TypeVar("T")


async def call_store(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a store call with a deadline.

    Domain exceptions raised by the store (e.g. DuplicateAssignmentException)
    pass through unchanged; timeouts and driver errors become
    PersistenceException.

    Raises:
        PersistenceException: On timeout or any non-domain store failure.
    """
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except TimeoutError as e:
        raise PersistenceException(operation, f"timed out after {timeout}s") from e
    except GatekeeperException:
        raise
    except Exception as e:
        raise PersistenceException(operation, str(e) or type(e).__name__) from e


async def call_cache(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a distributed cache call with a deadline.

    Raises:
        CacheUnavailableException: On timeout or any backend failure.
    """
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except TimeoutError as e:
        raise CacheUnavailableException(operation, f"timed out after {timeout}s") from e
    except CacheUnavailableException:
        raise
    except Exception as e:
        raise CacheUnavailableException(operation, str(e) or type(e).__name__) from e
