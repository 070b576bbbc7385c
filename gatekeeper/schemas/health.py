"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready."""

    status: str = Field(default="ok", description="Readiness status")
    database_backend: str = Field(..., description="Active store backend ('sql' or 'memory')")
    distributed_cache: bool = Field(..., description="True if the distributed cache is reachable")
