"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse

from src.user_api.api.http.app_data import ApplicationDependencies
from src.user_api.api.http.deps import (
    get_app_dependencies,
    get_object_storage_service,
    get_redis_service,
    get_temporal_service,
)
from src.user_api.core.services import (
    ObjectStorageService,
    RedisService,
    TemporalClientService,
)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": "user-api"}


def _status(enabled: bool, healthy: bool) -> str:
    if not enabled:
        return "disabled"
    return "healthy" if healthy else "unhealthy"


@router.get("/ready", response_model=None)
async def readiness(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
    redis_service: RedisService = Depends(get_redis_service),
    temporal_service: TemporalClientService = Depends(get_temporal_service),
    storage_service: ObjectStorageService = Depends(get_object_storage_service),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe.

    The database is required. Redis, Temporal and object storage count only
    when enabled; a disabled service is reported but never fails the check.
    The database and object storage checks block, so they run in the threadpool.
    """
    database_ok = await run_in_threadpool(app_deps.database_service.health_check)
    storage_ok = await run_in_threadpool(storage_service.health_check)

    checks = {
        "database": {"status": _status(True, database_ok)},
        "redis": {
            "status": _status(
                redis_service.is_enabled, await redis_service.health_check()
            )
        },
        "temporal": {
            "status": _status(
                temporal_service.is_enabled, await temporal_service.health_check()
            )
        },
        "object_storage": {
            "status": _status(storage_service.is_enabled, storage_ok)
        },
    }
    all_healthy = all(check["status"] != "unhealthy" for check in checks.values())

    body = {"status": "ready" if all_healthy else "not_ready", "checks": checks}
    if not all_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
