"""Composition root: builds the authorization services from settings.

Single place that chooses store and cache backends and wires them into the
application services. Used by the FastAPI lifespan and by embedding hosts
(e.g. a bot process) that call check_permission directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.application.interfaces.repositories import (
    IAuditLog,
    IConfigStore,
    IMaintenanceStore,
    IRoleManagementStore,
)
from gatekeeper.application.interfaces.services import ICache, IClock
from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.config_mutator import ConfigMutator
from gatekeeper.application.services.maintenance_gate import MaintenanceGate
from gatekeeper.application.services.operation_registry import OperationRegistry
from gatekeeper.application.services.permission_resolver import PermissionResolver
from gatekeeper.application.services.policy_cache import PolicyCache
from gatekeeper.application.services.role_resolver import RoleResolver
from gatekeeper.application.services.role_service import RoleService
from gatekeeper.core.config import Settings
from gatekeeper.shared.utils.datetime import SystemClock

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    config: IConfigStore
    roles: IRoleManagementStore
    maintenance: IMaintenanceStore
    audit: IAuditLog


@dataclass
class PermissionServices:
    """Everything a host needs: the resolver plus the mutating services."""

    settings: Settings
    clock: IClock
    stores: Stores
    registry: OperationRegistry
    policy_cache: PolicyCache
    audit: AuditRecorder
    maintenance: MaintenanceGate
    roles: RoleResolver
    resolver: PermissionResolver
    mutator: ConfigMutator
    role_service: RoleService
    cache: ICache | None = None


def memory_stores() -> Stores:
    from gatekeeper.infrastructure.persistence.memory_stores import (
        InMemoryAuditLog,
        InMemoryConfigStore,
        InMemoryMaintenanceStore,
        InMemoryRoleStore,
    )

    return Stores(
        config=InMemoryConfigStore(),
        roles=InMemoryRoleStore(),
        maintenance=InMemoryMaintenanceStore(),
        audit=InMemoryAuditLog(),
    )


def sql_stores(session_factory: async_sessionmaker[AsyncSession]) -> Stores:
    from gatekeeper.infrastructure.persistence.repositories import (
        AuditLogRepository,
        ConfigRepository,
        MaintenanceRepository,
        RoleRepository,
    )

    return Stores(
        config=ConfigRepository(session_factory),
        roles=RoleRepository(session_factory),
        maintenance=MaintenanceRepository(session_factory),
        audit=AuditLogRepository(session_factory),
    )


def build_services(
    settings: Settings,
    stores: Stores,
    cache: ICache | None = None,
    clock: IClock | None = None,
    registry: OperationRegistry | None = None,
) -> PermissionServices:
    """Wire the services around the given stores and optional distributed cache."""
    clock = clock or SystemClock()
    registry = registry or OperationRegistry(settings.operation_categories)
    store_timeout = settings.store_timeout_seconds

    policy_cache = PolicyCache(
        stores.config,
        stores.maintenance,
        clock,
        cache=cache,
        ttl_seconds=settings.cache_ttl_permissions,
        store_timeout=store_timeout,
        cache_timeout=settings.cache_timeout_seconds,
        max_local_entries=settings.cache_max_local_entries,
    )
    audit = AuditRecorder(
        stores.audit,
        clock,
        default_limit=settings.audit_default_limit,
        max_limit=settings.audit_max_limit,
        timeout=settings.audit_timeout_seconds,
        query_timeout=store_timeout,
    )
    maintenance = MaintenanceGate(stores.maintenance, policy_cache, audit, clock, store_timeout)
    roles = RoleResolver(stores.roles, policy_cache)
    developers = settings.developer_allowlist()
    resolver = PermissionResolver(maintenance, policy_cache, roles, registry, audit, developers)
    mutator = ConfigMutator(stores.config, policy_cache, audit, registry, clock, store_timeout)
    role_service = RoleService(stores.roles, policy_cache, clock, store_timeout)
    logger.info(
        "Permission services ready (%d developer(s), %d registered operation(s), distributed cache: %s)",
        len(developers),
        len(registry),
        "on" if cache is not None else "off",
    )
    return PermissionServices(
        settings=settings,
        clock=clock,
        stores=stores,
        registry=registry,
        policy_cache=policy_cache,
        audit=audit,
        maintenance=maintenance,
        roles=roles,
        resolver=resolver,
        mutator=mutator,
        role_service=role_service,
        cache=cache,
    )
