"""Tests for the distributed cache backends (in-memory, and Redis with a mocked client)."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import redis.asyncio as redis

from gatekeeper.domain.exceptions import CacheUnavailableException
from gatekeeper.infrastructure.cache.keys import tenant_pattern
from gatekeeper.infrastructure.cache.memory_cache import InMemoryCache
from gatekeeper.infrastructure.cache.redis_cache import RedisCache
from tests.conftest import FakeClock, make_settings


class TestInMemoryCache:
    async def test_get_set_expiry(self) -> None:
        clock = FakeClock()
        cache = InMemoryCache(clock)
        await cache.set("k", b"v", ttl=10)
        assert await cache.get("k") == b"v"
        clock.advance(10)
        assert await cache.get("k") is None
        assert len(cache) == 0

    async def test_invalidate_pattern_is_a_full_match(self) -> None:
        cache = InMemoryCache(FakeClock())
        for key in ("permissions:config:12:ban", "permissions:roles:12:5", "permissions:config:123:ban"):
            await cache.set(key, b"x", ttl=60)
        deleted = await cache.invalidate_pattern(tenant_pattern("12"))
        assert deleted == 2
        assert await cache.get("permissions:config:123:ban") == b"x"

    async def test_delete(self) -> None:
        cache = InMemoryCache(FakeClock())
        await cache.set("k", b"v", ttl=10)
        await cache.delete("k")
        await cache.delete("missing")
        assert await cache.get("k") is None


def _scan(keys: list[bytes]):
    async def scan_iter(match: str):
        for key in keys:
            yield key

    return scan_iter


@pytest.fixture
def redis_client() -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock()
    client.delete = AsyncMock()
    client.aclose = AsyncMock()
    return client


class TestRedisCache:
    async def test_get_and_set(self, redis_client: MagicMock) -> None:
        redis_client.get.return_value = b"payload"
        cache = RedisCache(redis_client=redis_client, settings=make_settings())
        assert cache.is_available()
        assert await cache.get("permissions:config:1:ban") == b"payload"
        await cache.set("permissions:config:1:ban", b"payload", 300)
        redis_client.setex.assert_awaited_once_with("permissions:config:1:ban", 300, b"payload")

    async def test_unavailable_without_client(self) -> None:
        cache = RedisCache(settings=make_settings())
        assert not cache.is_available()
        with pytest.raises(CacheUnavailableException):
            await cache.get("k")

    async def test_redis_error_becomes_cache_unavailable(self, redis_client: MagicMock) -> None:
        redis_client.get.side_effect = redis.ResponseError("WRONGTYPE")
        cache = RedisCache(redis_client=redis_client, settings=make_settings())
        with pytest.raises(CacheUnavailableException, match="WRONGTYPE"):
            await cache.get("k")

    async def test_connection_error_retries_once(
        self, redis_client: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        redis_client.get.side_effect = redis.ConnectionError("reset")
        cache = RedisCache(redis_client=redis_client, settings=make_settings())

        async def failed_connect() -> None:
            cache._connected = False

        monkeypatch.setattr(cache, "connect", failed_connect)
        with pytest.raises(CacheUnavailableException, match="reset"):
            await cache.get("k")
        assert not cache.is_available()
        redis_client.aclose.assert_awaited_once()

    async def test_invalidate_pattern_filters_scan_results(self, redis_client: MagicMock) -> None:
        keys = [
            b"permissions:config:12:ban",
            b"permissions:maintenance:12",
            b"permissions:config:123:ban",
        ]
        redis_client.scan_iter = _scan(keys)
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[2])
        pipeline_cm = MagicMock()
        pipeline_cm.__aenter__ = AsyncMock(return_value=pipe)
        pipeline_cm.__aexit__ = AsyncMock(return_value=False)
        redis_client.pipeline = MagicMock(return_value=pipeline_cm)

        cache = RedisCache(redis_client=redis_client, settings=make_settings())
        deleted = await cache.invalidate_pattern(tenant_pattern("12"))

        assert deleted == 2
        pipe.unlink.assert_called_once_with(b"permissions:config:12:ban", b"permissions:maintenance:12")

    async def test_disconnect(self, redis_client: MagicMock) -> None:
        cache = RedisCache(redis_client=redis_client, settings=make_settings())
        await cache.disconnect()
        redis_client.aclose.assert_awaited_once()
        assert not cache.is_available()
