"""API route registration."""

from fastapi import APIRouter, FastAPI

from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    router = APIRouter(prefix="/v1")

    from cloudbot.api.routes.prices import router as prices_router
    from cloudbot.api.routes.scenarios import router as scenarios_router

    router.include_router(prices_router, tags=["Prices"])
    router.include_router(scenarios_router, tags=["Scenarios"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register the v1 API and the root-level health routes."""
    app.include_router(create_v1_router())

    from cloudbot.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
