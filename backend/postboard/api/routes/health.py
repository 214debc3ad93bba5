"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health always returns 200 if the process is up (liveness); no external calls
    - GET /ready returns 503 with the causing error if the database round-trip fails
    - Session store connectivity is reported by /ready when configured, never gating it

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from postboard.core.errors import utc_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Basic liveness probe. Returns 200 if the process is up."""
    lifecycle = request.app.state.lifecycle
    return {
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "uptime": lifecycle.uptime_seconds(),
        "memory": lifecycle.memory_usage(),
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — includes database connectivity."""
    report = await request.app.state.lifecycle.check_readiness()
    if not report.ready:
        logger.error(f"Readiness check failed: {report.error}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not ready",
                "error": {"message": report.error, "timestamp": utc_timestamp()},
            },
        )
    return {
        "status": "ready",
        "timestamp": utc_timestamp(),
        "checks": report.checks,
    }
