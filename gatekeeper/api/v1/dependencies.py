"""Presentation-layer dependency injection.

Provides FastAPI Depends() for the authorization services built by the
lifespan (app.state.services). Routes depend only on these dependencies,
not on stores or cache backends directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Path, Request

from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.application.services.config_mutator import ConfigMutator
from gatekeeper.application.services.maintenance_gate import MaintenanceGate
from gatekeeper.application.services.permission_resolver import PermissionResolver
from gatekeeper.application.services.role_service import RoleService
from gatekeeper.core.composition import PermissionServices
from gatekeeper.schemas.permission import SNOWFLAKE_PATTERN


def get_services(request: Request) -> PermissionServices:
    """Return the services container created at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Permission services not initialized (lifespan not run)")
    return services


Services = Annotated[PermissionServices, Depends(get_services)]


def get_resolver(services: Services) -> PermissionResolver:
    return services.resolver


def get_mutator(services: Services) -> ConfigMutator:
    return services.mutator


def get_maintenance_gate(services: Services) -> MaintenanceGate:
    return services.maintenance


def get_audit_recorder(services: Services) -> AuditRecorder:
    return services.audit


def get_role_service(services: Services) -> RoleService:
    return services.role_service


# Path and header parameters shared by the tenant-scoped routes.
TenantId = Annotated[str, Path(pattern=SNOWFLAKE_PATTERN, description="Tenant (guild) id")]
ActorId = Annotated[
    str,
    Header(
        alias="X-Actor-ID",
        pattern=SNOWFLAKE_PATTERN,
        description="Id of the user performing the change (recorded in the audit log)",
    ),
]
