"""API route registration."""

from fastapi import APIRouter, FastAPI

from frontdesk.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from frontdesk.api.routes.triage import router as triage_router
    from frontdesk.api.routes.turns import router as turns_router

    router.include_router(turns_router, tags=["Turns"])
    router.include_router(triage_router, tags=["Triage"])

    logger.debug("v1_router_created", routes=["turns", "triage"])
    return router


def register_routes(app: FastAPI, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    # Health routes at root level
    from frontdesk.api.routes.health import metrics_router
    from frontdesk.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])
