"""Health check endpoints router for monitoring service availability."""

import os
from typing import Any

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse

from src.app.api.http.app_data import ApplicationDependencies
from src.app.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": get_config().app.name}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe covering the database and the image directory.

    Returns 200 if every dependency is ready, 503 otherwise.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()
    checks: dict[str, dict[str, Any]] = {}

    db_healthy = await run_in_threadpool(app_deps.database_service.health_check)
    checks["database"] = {
        "status": "healthy" if db_healthy else "unhealthy",
        "type": "sqlite" if config.database.is_sqlite else "sql",
    }

    directory = app_deps.image_store.directory
    storage_healthy = directory.is_dir() and os.access(directory, os.W_OK)
    checks["image_store"] = {
        "status": "healthy" if storage_healthy else "unhealthy",
        "directory": str(directory),
    }

    all_healthy = db_healthy and storage_healthy
    body = {"status": "ready" if all_healthy else "not_ready", "checks": checks}
    if not all_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
