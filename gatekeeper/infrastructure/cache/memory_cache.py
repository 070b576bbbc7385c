"""Process-local ICache implementation (dev, tests, single-process deployments)."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from gatekeeper.application.interfaces.services import IClock
from gatekeeper.shared.utils.datetime import SystemClock


class InMemoryCache:
    """Dict-backed cache with clock-based expiry and regex invalidation.

    Expired keys are dropped lazily when read or matched.
    """

    def __init__(self, clock: IClock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._data: dict[str, tuple[bytes, datetime]] = {}

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> bytes | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock.now() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self._data[key] = (value, self._clock.now() + timedelta(seconds=ttl))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def invalidate_pattern(self, pattern: str) -> int:
        regex = re.compile(pattern)
        doomed = [key for key in self._data if regex.fullmatch(key)]
        for key in doomed:
            self._data.pop(key, None)
        return len(doomed)

    def __len__(self) -> int:
        return len(self._data)
