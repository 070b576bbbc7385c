"""Permission audit log API: newest-first query (tenant-scoped, read-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gatekeeper.api.v1.dependencies import TenantId, get_audit_recorder
from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_log(
    tenant_id: TenantId,
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    limit: Annotated[int | None, Query(ge=1, description="Clamped to the configured maximum")] = None,
    operation_name: str | None = None,
) -> AuditLogListResponse:
    """List audit entries for tenant, newest first, optionally for one operation."""
    entries = await audit.query(tenant_id, limit, operation_name)
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in entries],
        limit=audit.clamp_limit(limit),
    )
