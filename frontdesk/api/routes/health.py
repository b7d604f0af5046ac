"""Health check and metrics endpoints."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from frontdesk import __version__
from frontdesk.api.dependencies import CacheServiceDep, LearnerDep
from frontdesk.api.models.health import ComponentHealth, HealthResponse
from frontdesk.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: CacheServiceDep, learner: LearnerDep) -> HealthResponse:
    """Service health.

    The cache is degraded, not unhealthy, while its backend fails: turns
    still complete against the source of truth.
    """
    failures = cache.monitor.consecutive_failures
    components = [
        ComponentHealth(
            name="cache",
            status="degraded" if failures else "healthy",
            message=f"{failures} consecutive backend failures" if failures else None,
        ),
        ComponentHealth(
            name="learning",
            status="healthy",
            message=f"{learner.pending} writes pending",
        ),
    ]

    overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"

    logger.debug("health_check_completed", status=overall_status)
    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
