"""Cache backends for the distributed policy-cache layer, and key builders.

RedisCache uses gatekeeper.core.config; key format is in keys.py (DRY).
"""

from gatekeeper.infrastructure.cache.keys import (
    config_key,
    maintenance_key,
    permission_key,
    roles_key,
    tenant_pattern,
)
from gatekeeper.infrastructure.cache.memory_cache import InMemoryCache
from gatekeeper.infrastructure.cache.redis_cache import RedisCache

__all__ = [
    "InMemoryCache",
    "RedisCache",
    "config_key",
    "maintenance_key",
    "permission_key",
    "roles_key",
    "tenant_pattern",
]
