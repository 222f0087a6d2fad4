"""Health check and metrics endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cloudbot import __version__
from cloudbot.api.dependencies import SettingsDep
from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(settings: SettingsDep) -> dict[str, Any]:
    """Report liveness and the running version."""
    logger.debug("health_check_request")
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
