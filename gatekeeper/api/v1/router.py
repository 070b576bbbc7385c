"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from gatekeeper.api.v1.dependencies (no manual store/service
construction).
"""

from fastapi import APIRouter

from gatekeeper.api.v1.endpoints import audit_log, health, maintenance, operations, permissions, roles

TENANT_PREFIX = "/tenants/{tenant_id}"

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(permissions.router, prefix=TENANT_PREFIX, tags=["permissions"])
api_router.include_router(operations.router, prefix=f"{TENANT_PREFIX}/operations", tags=["operations"])
api_router.include_router(maintenance.router, prefix=f"{TENANT_PREFIX}/maintenance", tags=["maintenance"])
api_router.include_router(audit_log.router, prefix=f"{TENANT_PREFIX}/audit-log", tags=["audit-log"])
api_router.include_router(roles.router, prefix=f"{TENANT_PREFIX}/roles", tags=["roles"])
