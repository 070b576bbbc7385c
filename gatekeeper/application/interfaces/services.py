"""Service interfaces (ports) for the application layer.

Protocols for the cache backend and the clock (DIP).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


# Cache interface
class ICache(Protocol):
    """Byte-oriented key/value cache with TTL and regex invalidation.

    Backends raise CacheUnavailableException when they cannot serve a call;
    callers bypass the cache in that case.
    """

    def is_available(self) -> bool:
        """Return True if the backend is connected and usable."""

    async def get(self, key: str) -> bytes | None:
        """Return the cached bytes, or None on miss."""

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store value for ttl seconds."""

    async def delete(self, key: str) -> None:
        """Remove key (no-op when absent)."""

    async def invalidate_pattern(self, pattern: str) -> int:
        """Remove every key fully matching the regex pattern; return how many."""


# Clock interface
class IClock(Protocol):
    """Source of the current time (UTC-aware). Injected so TTLs are testable."""

    def now(self) -> datetime:
        """Return the current time."""
