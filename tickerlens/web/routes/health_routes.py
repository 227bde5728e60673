"""
Health check routes.
"""

import time

from fastapi import APIRouter, Request
from loguru import logger

from tickerlens import __version__

from ..models import APIResponse, HealthStatus

router = APIRouter()


@router.get("/health", response_model=APIResponse)
async def health_check(request: Request) -> APIResponse:
    """
    Basic health check.
    """
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    health = HealthStatus(status="healthy", version=__version__, uptime=time.monotonic() - started_at)

    logger.info(
        "Health check completed",
        extra={"endpoint": "/health", "status": health.status, "uptime_seconds": health.uptime},
    )
    return APIResponse(success=True, data=health.model_dump(mode="json"), message="health check complete")
