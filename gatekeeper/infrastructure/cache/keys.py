"""Cache key builders. Single place for key format (DRY).

Keys look like permissions:<kind>:<tenant_id>[:<key>]. Key components
(tenant_id, operation_name, user_id) must not contain CACHE_KEY_SEP to avoid
ambiguous or colliding keys.
"""

import re

from gatekeeper.core.constants import (
    CACHE_KEY_SEP,
    CACHE_KIND_CONFIG,
    CACHE_KIND_MAINTENANCE,
    CACHE_KIND_ROLES,
    CACHE_PREFIX_PERMISSIONS,
)

_REGEX_META = frozenset(".^$*+?{}[]\\|()")


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def permission_key(kind: str, tenant_id: str, key: str | None = None) -> str:
    """Cache key for one policy-cache entry."""
    _validate_key_component(kind, "kind")
    _validate_key_component(tenant_id, "tenant_id")
    parts = [CACHE_PREFIX_PERMISSIONS, kind, tenant_id]
    if key is not None:
        _validate_key_component(key, "key")
        parts.append(key)
    return CACHE_KEY_SEP.join(parts)


def config_key(tenant_id: str, operation_name: str) -> str:
    """Cache key for a tenant's stored operation config (or its absence)."""
    return permission_key(CACHE_KIND_CONFIG, tenant_id, operation_name)


def roles_key(tenant_id: str, user_id: str) -> str:
    """Cache key for a user's expanded custom-role permissions in a tenant."""
    return permission_key(CACHE_KIND_ROLES, tenant_id, user_id)


def maintenance_key(tenant_id: str) -> str:
    """Cache key for a tenant's maintenance state."""
    return permission_key(CACHE_KIND_MAINTENANCE, tenant_id)


def tenant_pattern(tenant_id: str, kind: str | None = None) -> str:
    """Regex (full match) covering every key of a tenant, optionally of one kind.

    permissions:[^:]+:<tenant>(:.*)? rather than permissions:.*:<tenant>.* so
    tenant 12 never matches keys of tenant 123.
    """
    _validate_key_component(tenant_id, "tenant_id")
    sep = re.escape(CACHE_KEY_SEP)
    kind_part = re.escape(kind) if kind else f"[^{sep}]+"
    return (
        f"{re.escape(CACHE_PREFIX_PERMISSIONS)}{sep}{kind_part}{sep}"
        f"{re.escape(tenant_id)}(?:{sep}.*)?"
    )


def literal_prefix(pattern: str) -> str:
    """Return the leading part of a regex that matches only itself.

    Used to narrow a SCAN before regex filtering. Escaped characters are
    unescaped; scanning stops at the first metacharacter.
    """
    prefix: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern) and not pattern[i + 1].isalnum():
            prefix.append(pattern[i + 1])
            i += 2
            continue
        if ch in _REGEX_META:
            break
        prefix.append(ch)
        i += 1
    # A quantifier applies to the preceding character, which is then not literal.
    if i < len(pattern) and pattern[i] in "*?{" and prefix:
        prefix.pop()
    return "".join(prefix)
