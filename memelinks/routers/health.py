# memelinks/routers/health.py
# Health check endpoints for monitoring and load balancers
# Provides liveness and readiness probes

import time
import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from memelinks.repositories.link_repository import LinkRepository
from memelinks.routers.deps import get_repository, get_session_registry
from memelinks.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str  # "healthy", "unhealthy"
    timestamp: float
    version: str = "1.0.0"
    checks: Dict[str, Dict[str, Any]] = {}


class ComponentHealth(BaseModel):
    """Individual component health."""
    status: str
    latency_ms: float = 0.0
    message: str = ""


async def check_database_health(repository: LinkRepository) -> ComponentHealth:
    """Run a trivial query against the link store."""
    start = time.time()
    try:
        ok = await repository.ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return ComponentHealth(
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message=f"Database error: {type(e).__name__}"
        )

    latency_ms = (time.time() - start) * 1000
    if not ok:
        return ComponentHealth(
            status="unhealthy",
            latency_ms=latency_ms,
            message="Database query returned unexpected result"
        )
    return ComponentHealth(status="healthy", latency_ms=latency_ms)


@router.get("/health", response_model=HealthStatus)
async def health_check(
    response: Response,
    repository: LinkRepository = Depends(get_repository),
    sessions: SessionRegistry = Depends(get_session_registry),
):
    """
    Full health check endpoint.
    Returns status of all components.
    """
    db_health = await check_database_health(repository)
    checks = {
        "database": {
            "status": db_health.status,
            "latency_ms": round(db_health.latency_ms, 2),
            "message": db_health.message
        },
        "sessions": {
            "status": "healthy",
            "active": len(sessions),
        },
    }

    overall_status = "healthy"
    response.status_code = status.HTTP_200_OK
    if db_health.status == "unhealthy":
        overall_status = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthStatus(
        status=overall_status,
        timestamp=time.time(),
        checks=checks
    )


@router.get("/health/live")
async def liveness_probe():
    """
    Liveness probe.
    Returns 200 if the application is running.
    Does NOT check external dependencies.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(response: Response, repository: LinkRepository = Depends(get_repository)):
    """
    Readiness probe.
    Returns 200 only if the link store answers.
    """
    db_health = await check_database_health(repository)

    if db_health.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "reason": db_health.message
        }

    return {"status": "ready"}
