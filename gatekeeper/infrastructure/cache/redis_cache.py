"""Redis-backed distributed layer of the policy cache.

Async client from redis.asyncio, byte values with server-side TTL, and regex
pattern invalidation via SCAN + batched UNLINK. Integrates with
gatekeeper.infrastructure.cache.keys for key format (DRY).
"""

from __future__ import annotations

import logging
import re

import redis.asyncio as redis

from gatekeeper.core.config import Settings, get_settings
from gatekeeper.domain.exceptions import CacheUnavailableException
from gatekeeper.infrastructure.cache.keys import literal_prefix

logger = logging.getLogger(__name__)

_GLOB_META = re.compile(r"([*?\[\]\\])")
UNLINK_CHUNK_SIZE = 500


def _glob_escape(value: str) -> str:
    return _GLOB_META.sub(r"\\\1", value)


class RedisCache:
    """Implements ICache over Redis.

    Call connect() at startup and disconnect() at shutdown. A dropped
    connection is retried once per call; after that the call raises
    CacheUnavailableException and the policy cache falls back to the store.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Connection settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup.

        A failed connection leaves the cache unavailable rather than failing startup.
        """
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=(
                    self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None
                ),
                decode_responses=False,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s", self.settings.redis_host, self.settings.redis_port
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Distributed cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError as e:
                logger.debug("Ignoring error while closing stale Redis client: %s", e)
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    def _client(self, operation: str) -> redis.Redis:
        if not self.is_available() or self.redis is None:
            raise CacheUnavailableException(operation, "not connected")
        return self.redis

    async def get(self, key: str) -> bytes | None:
        """Return cached bytes or None on miss.

        Raises:
            CacheUnavailableException: If Redis cannot be reached.
        """
        try:
            value = await self._client("get").get(key)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if not await self._reconnect():
                raise CacheUnavailableException("get", str(e)) from e
            try:
                value = await self._client("get").get(key)
            except redis.RedisError as retry_error:
                raise CacheUnavailableException("get", str(retry_error)) from retry_error
        except redis.RedisError as e:
            raise CacheUnavailableException("get", str(e)) from e
        logger.debug("Cache %s: %s", "HIT" if value is not None else "MISS", key)
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store value with TTL in seconds.

        Raises:
            CacheUnavailableException: If Redis cannot be reached.
        """
        try:
            await self._client("set").setex(key, ttl, value)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if not await self._reconnect():
                raise CacheUnavailableException("set", str(e)) from e
            try:
                await self._client("set").setex(key, ttl, value)
            except redis.RedisError as retry_error:
                raise CacheUnavailableException("set", str(retry_error)) from retry_error
        except redis.RedisError as e:
            raise CacheUnavailableException("set", str(e)) from e
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    async def delete(self, key: str) -> None:
        """Remove key from cache.

        Raises:
            CacheUnavailableException: If Redis cannot be reached.
        """
        try:
            await self._client("delete").delete(key)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if not await self._reconnect():
                raise CacheUnavailableException("delete", str(e)) from e
            try:
                await self._client("delete").delete(key)
            except redis.RedisError as retry_error:
                raise CacheUnavailableException("delete", str(retry_error)) from retry_error
        except redis.RedisError as e:
            raise CacheUnavailableException("delete", str(e)) from e
        logger.debug("Cache DELETE: %s", key)

    async def invalidate_pattern(self, pattern: str) -> int:
        """Delete all keys fully matching the regex using SCAN + batched UNLINK.

        SCAN is narrowed to the regex's literal prefix; each candidate is then
        checked with re.fullmatch, so the glob never over-deletes.

        Args:
            pattern: Regex (e.g. permissions:[^:]+:123(?::.*)?).

        Returns:
            Number of keys deleted.
        """
        try:
            return await self._invalidate_pattern(pattern)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if not await self._reconnect():
                raise CacheUnavailableException("invalidate_pattern", str(e)) from e
            try:
                return await self._invalidate_pattern(pattern)
            except redis.RedisError as retry_error:
                raise CacheUnavailableException(
                    "invalidate_pattern", str(retry_error)
                ) from retry_error
        except redis.RedisError as e:
            raise CacheUnavailableException("invalidate_pattern", str(e)) from e

    async def _invalidate_pattern(self, pattern: str) -> int:
        client = self._client("invalidate_pattern")
        regex = re.compile(pattern)
        match = _glob_escape(literal_prefix(pattern)) + "*"
        deleted = 0
        chunk: list[bytes] = []
        async for key in client.scan_iter(match=match):
            name = key.decode() if isinstance(key, bytes) else key
            if not regex.fullmatch(name):
                continue
            chunk.append(key)
            if len(chunk) >= UNLINK_CHUNK_SIZE:
                deleted += await self._unlink(client, chunk)
                chunk = []
        if chunk:
            deleted += await self._unlink(client, chunk)
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    @staticmethod
    async def _unlink(client: redis.Redis, keys: list[bytes]) -> int:
        async with client.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = await pipe.execute()
        return sum(int(r or 0) for r in results)
