"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (e.g. DATABASE_URL for the
sql backend) and the developer allowlist format are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gatekeeper.domain.enums import OperationCategory
from gatekeeper.domain.value_objects.core import DeveloperAllowlist


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; validate_backends enforces the ones that
    depend on the selected storage backend.
    """

    # App
    app_name: str = "gatekeeper"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str | None = None
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Developers bypass every tenant policy except maintenance lockdown.
    # Comma-separated user ids, parsed once into an immutable allowlist.
    developer_user_ids: str = ""

    # Storage: "sql" (SQLAlchemy async) or "memory" (process-local, dev/tests)
    database_backend: str = "memory"
    database_url: str = ""
    database_echo: bool = False
    database_auto_create: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Redis distributed cache (optional second layer of the policy cache)
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_permissions: int = 300
    cache_max_local_entries: int = 10_000

    # Upper bounds on every await on the decision path (seconds)
    store_timeout_seconds: float = 0.25
    cache_timeout_seconds: float = 0.1
    audit_timeout_seconds: float = 1.0

    # Audit log queries
    audit_default_limit: int = 50
    audit_max_limit: int = 100

    # Static operation categories (JSON object: {"ban": "admin", "ping": "general"})
    operation_categories: dict[str, OperationCategory] = {}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate backend selection, timeouts, and the developer allowlist.

        - sql: DATABASE_URL required (e.g. postgresql+asyncpg://...).
        - memory: nothing required; state is lost on restart.
        """
        if self.database_backend == "sql":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'sql'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'sql' or 'memory', got: {self.database_backend!r}"
            )
        if self.store_timeout_seconds <= 0 or self.cache_timeout_seconds <= 0:
            raise ValueError("store_timeout_seconds and cache_timeout_seconds must be positive")
        if self.cache_ttl_permissions <= 0:
            raise ValueError("cache_ttl_permissions must be positive")
        if self.cache_max_local_entries <= 0:
            raise ValueError("cache_max_local_entries must be positive")
        if not 0 < self.audit_default_limit <= self.audit_max_limit:
            raise ValueError("audit_default_limit must be between 1 and audit_max_limit")
        # Fail at startup rather than silently ignoring a malformed developer id.
        DeveloperAllowlist.from_csv(self.developer_user_ids)
        return self

    def developer_allowlist(self) -> DeveloperAllowlist:
        """Return the immutable developer allowlist parsed from developer_user_ids."""
        return DeveloperAllowlist.from_csv(self.developer_user_ids)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
