"""Two-layer memoization of policy lookups (configs, role grants, maintenance).

Layer one is a process-local map; layer two is an optional distributed cache
shared by every process. When the distributed cache is configured, reads go
there first and the local map only answers while it is unreachable, so an
invalidation by any process is seen by all of them. Without one, the local
map is the cache. Absence is cached too ("null" in the distributed layer), so
an operation without an override does not hit the store on every check.

Invalidation bumps a per-tenant epoch; a load that started before the bump
returns its value but does not repopulate either layer. When the distributed
layer cannot be invalidated, the tenant's distributed entries are distrusted
until every entry written before the failure has expired.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from gatekeeper.application.interfaces.repositories import IConfigStore, IMaintenanceStore
from gatekeeper.application.interfaces.services import ICache, IClock
from gatekeeper.application.services.bounded import call_cache, call_store
from gatekeeper.core.constants import (
    CACHE_KIND_CONFIG,
    CACHE_KIND_MAINTENANCE,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_LOCAL_CACHE_MAX_ENTRIES,
)
from gatekeeper.domain.entities.maintenance import MaintenanceState
from gatekeeper.domain.entities.policy import OperationPermissionConfig
from gatekeeper.domain.exceptions import CacheUnavailableException
from gatekeeper.infrastructure.cache.keys import permission_key, tenant_pattern

logger = logging.getLogger(__name__)

T = TypeVar("T")

_config_adapter: TypeAdapter[OperationPermissionConfig | None] = TypeAdapter(
    OperationPermissionConfig | None
)
_maintenance_adapter: TypeAdapter[MaintenanceState | None] = TypeAdapter(MaintenanceState | None)

_LocalKey = tuple[str, str, str]


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    fetched_at: datetime


class PolicyCache:
    """Memoizes ConfigStore/RoleStore/MaintenanceStore reads per tenant.

    Entries are served until now - fetched_at >= ttl, or until invalidated.
    The local map holds at most max_local_entries; expired entries are purged
    when it fills, then the oldest are evicted.
    """

    def __init__(
        self,
        config_store: IConfigStore,
        maintenance_store: IMaintenanceStore,
        clock: IClock,
        cache: ICache | None = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        store_timeout: float = 0.25,
        cache_timeout: float = 0.1,
        max_local_entries: int = DEFAULT_LOCAL_CACHE_MAX_ENTRIES,
    ) -> None:
        if max_local_entries < 1:
            raise ValueError("max_local_entries must be positive")
        self._config_store = config_store
        self._maintenance_store = maintenance_store
        self._clock = clock
        self._cache = cache
        self.ttl_seconds = ttl_seconds
        self._ttl = timedelta(seconds=ttl_seconds)
        self._store_timeout = store_timeout
        self._cache_timeout = cache_timeout
        self._max_local_entries = max_local_entries
        self._local: dict[_LocalKey, _CacheEntry] = {}
        self._epochs: dict[str, int] = {}
        self._distrusted_until: dict[str, datetime] = {}

    def __len__(self) -> int:
        return len(self._local)

    async def get_config(
        self, tenant_id: str, operation_name: str
    ) -> OperationPermissionConfig | None:
        """Return the tenant's override for operation_name, or None if it has none."""
        return await self.get_or_load(
            CACHE_KIND_CONFIG,
            tenant_id,
            operation_name,
            lambda: self._config_store.get(tenant_id, operation_name),
            _config_adapter,
        )

    async def get_maintenance(self, tenant_id: str) -> MaintenanceState | None:
        return await self.get_or_load(
            CACHE_KIND_MAINTENANCE,
            tenant_id,
            None,
            lambda: self._maintenance_store.get(tenant_id),
            _maintenance_adapter,
        )

    async def get_or_load(
        self,
        kind: str,
        tenant_id: str,
        key: str | None,
        loader: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        """Return the cached value for (kind, tenant, key), loading it on miss.

        Raises:
            PersistenceException: If the store times out or fails on a miss.
        """
        local_key = (kind, tenant_id, key or "")
        cache_key = permission_key(kind, tenant_id, key)
        epoch = self._epochs.get(tenant_id, 0)
        now = self._clock.now()

        if self._is_distrusted(tenant_id, now):
            logger.debug("Cache BYPASS (pending invalidation): %s", cache_key)
        elif self._distributed_available():
            try:
                found, value = await self._read_distributed(cache_key, adapter)
            except CacheUnavailableException as e:
                logger.warning("Distributed cache bypassed for %s: %s", cache_key, e.message)
                found, value = self._read_local(local_key, now)
            else:
                if found:
                    logger.debug("Cache HIT (distributed): %s", cache_key)
                    self._remember(tenant_id, epoch, local_key, value, now)
            if found:
                return value
        else:
            found, value = self._read_local(local_key, now)
            if found:
                return value

        logger.debug("Cache MISS: %s", cache_key)
        value = await call_store(loader(), self._store_timeout, f"{kind}_store.get")
        if self._remember(tenant_id, epoch, local_key, value, self._clock.now()):
            await self._write_distributed(cache_key, adapter.dump_json(value))
        return value

    async def invalidate(self, kind: str, tenant_id: str, key: str | None = None) -> None:
        """Drop one entry from both layers."""
        self._bump(tenant_id)
        self._local.pop((kind, tenant_id, key or ""), None)
        if self._cache is None:
            return
        cache_key = permission_key(kind, tenant_id, key)
        if not self._cache.is_available():
            self._distrust(tenant_id, cache_key, "cache unavailable")
            return
        try:
            await call_cache(self._cache.delete(cache_key), self._cache_timeout, "cache.delete")
        except CacheUnavailableException as e:
            self._distrust(tenant_id, cache_key, e.message)

    async def invalidate_tenant(self, tenant_id: str, kind: str | None = None) -> None:
        """Drop every entry of a tenant (optionally only one kind) from both layers."""
        self._bump(tenant_id)
        stale = [
            k for k in self._local if k[1] == tenant_id and (kind is None or k[0] == kind)
        ]
        for k in stale:
            self._local.pop(k, None)
        if self._cache is None:
            return
        pattern = tenant_pattern(tenant_id, kind)
        if not self._cache.is_available():
            self._distrust(tenant_id, pattern, "cache unavailable")
            return
        try:
            await call_cache(
                self._cache.invalidate_pattern(pattern),
                self._cache_timeout,
                "cache.invalidate_pattern",
            )
        except CacheUnavailableException as e:
            self._distrust(tenant_id, pattern, e.message)

    def _bump(self, tenant_id: str) -> None:
        self._epochs[tenant_id] = self._epochs.get(tenant_id, 0) + 1

    def _distrust(self, tenant_id: str, target: str, message: str) -> None:
        logger.warning(
            "Cache invalidation failed for %s, reading tenant %s from the store for %ss: %s",
            target,
            tenant_id,
            self.ttl_seconds,
            message,
        )
        self._distrusted_until[tenant_id] = self._clock.now() + self._ttl

    def _is_distrusted(self, tenant_id: str, now: datetime) -> bool:
        until = self._distrusted_until.get(tenant_id)
        if until is None:
            return False
        if now >= until:
            del self._distrusted_until[tenant_id]
            return False
        return True

    def _read_local(self, local_key: _LocalKey, now: datetime) -> tuple[bool, Any]:
        entry = self._local.get(local_key)
        if entry is None:
            return False, None
        if now - entry.fetched_at >= self._ttl:
            del self._local[local_key]
            return False, None
        return True, entry.value

    def _remember(
        self, tenant_id: str, epoch: int, local_key: _LocalKey, value: Any, fetched_at: datetime
    ) -> bool:
        """Store value locally unless the tenant was invalidated since epoch was read."""
        if self._epochs.get(tenant_id, 0) != epoch:
            logger.debug("Dropping load of %s raced by an invalidation", local_key)
            return False
        self._local.pop(local_key, None)
        if len(self._local) >= self._max_local_entries:
            self._evict(fetched_at)
        self._local[local_key] = _CacheEntry(value, fetched_at)
        return True

    def _evict(self, now: datetime) -> None:
        for k in [k for k, e in self._local.items() if now - e.fetched_at >= self._ttl]:
            del self._local[k]
        # Evict down to nine tenths of capacity.
        target = self._max_local_entries - max(1, self._max_local_entries // 10)
        while len(self._local) > target:
            del self._local[next(iter(self._local))]

    def _distributed_available(self) -> bool:
        return self._cache is not None and self._cache.is_available()

    async def _read_distributed(self, cache_key: str, adapter: TypeAdapter[T]) -> tuple[bool, T | None]:
        """Return (found, value). Raises CacheUnavailableException if the cache fails."""
        raw = await call_cache(self._cache.get(cache_key), self._cache_timeout, "cache.get")
        if raw is None:
            return False, None
        try:
            return True, adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Discarding undecodable cache entry %s", cache_key)
            return False, None

    async def _write_distributed(self, cache_key: str, payload: bytes) -> None:
        if not self._distributed_available():
            return
        try:
            await call_cache(
                self._cache.set(cache_key, payload, self.ttl_seconds),
                self._cache_timeout,
                "cache.set",
            )
        except CacheUnavailableException as e:
            logger.warning("Distributed cache write skipped for %s: %s", cache_key, e.message)
