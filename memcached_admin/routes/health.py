# ─────────────────────────────────────────────────────────────────────────────
# Health Check Routes — liveness and readiness
# ─────────────────────────────────────────────────────────────────────────────
#   /health        → Liveness probe. Near-zero cost, always 200.
#   /health/ready  → Readiness probe. 503 when no memcached client is bound.
#                    Does not touch the network; use /memcached/info for that.
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from memcached_admin.config import Settings
from memcached_admin.dependencies import get_admin_service, get_settings_dep
from memcached_admin.schemas import LivenessResponse, ReadinessResponse
from memcached_admin.services.admin import MemcachedAdminService

router = APIRouter()


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe: is the process alive?"""
    return LivenessResponse(status="ok")


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(
    service: MemcachedAdminService = Depends(get_admin_service),
    settings: Settings = Depends(get_settings_dep),
) -> JSONResponse:
    """Readiness probe: can this instance administer a cluster?"""
    ready = service.is_bound
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        client_bound=ready,
        servers=settings.server_list if ready else [],
    )
    return JSONResponse(
        status_code=200 if ready else 503,
        content=response.model_dump(),
    )
