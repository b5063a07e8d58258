"""Health — liveness and readiness for the reframing API.

Invariants:
    - GET /health/ answers 200 whenever the process serves requests
    - GET /health/ready answers 503 until the database responds and the lifespan has
      wired the reframe controller and journal analyzer onto app.state

Design Decisions:
    - db_manager read from the module per request: it is assigned in the lifespan,
      after this module is imported
    - Readiness never calls the model: a probe must not spend tokens
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from mindful_reframe.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

_SERVICES = ("reframe_controller", "journal_analyzer")


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "mindful-reframe-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    manager = database.db_manager
    checks = {
        "database": (
            "healthy" if manager and await manager.health_check() else "unavailable"
        ),
    }
    for name in _SERVICES:
        wired = getattr(request.app.state, name, None) is not None
        checks[name] = "configured" if wired else "missing"

    failing = [k for k, v in checks.items() if v not in ("healthy", "configured")]
    if failing:
        logger.warning(f"Readiness check failed: {', '.join(failing)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
