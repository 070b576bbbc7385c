"""Health check endpoints; used for liveness and readiness probes."""

from fastapi import APIRouter

from gatekeeper.api.v1.dependencies import Services
from gatekeeper.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(services: Services) -> ReadinessResponse:
    """Report the active backends. A down distributed cache does not make the service unready."""
    cache = services.cache
    return ReadinessResponse(
        database_backend=services.settings.database_backend,
        distributed_cache=cache is not None and cache.is_available(),
    )
