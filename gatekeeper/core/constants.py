"""Core constants: cache key structure, TTLs, and decision reason strings.

Single source of truth for cache key structure and the human-readable
reasons returned on denies.
"""

# Cache key layout: permissions:<kind>:<tenant_id>[:<key>]
CACHE_PREFIX_PERMISSIONS = "permissions"
CACHE_KIND_CONFIG = "config"
CACHE_KIND_ROLES = "roles"
CACHE_KIND_MAINTENANCE = "maintenance"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Default policy cache lifetime (seconds)
DEFAULT_CACHE_TTL_SECONDS = 300

# Upper bound on process-local policy cache entries
DEFAULT_LOCAL_CACHE_MAX_ENTRIES = 10_000

# Deny reasons (returned to callers and written to the audit log)
REASON_MAINTENANCE = "tenant in maintenance"
REASON_EXPLICIT_DENY = "explicit deny"
REASON_INSUFFICIENT = "insufficient permissions"
REASON_CHECK_FAILED = "permission check failed"

# Shortcut names reported in Decision.bypassed_by
BYPASS_DEVELOPER = "developer"
BYPASS_EXPLICIT_ALLOW = "explicit-allow"
