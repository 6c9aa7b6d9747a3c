"""
Health check endpoints.

- GET /: basic liveness message
- GET /health: configuration status of the upstream services and error statistics
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from typing import Any, Dict
import logging

from app.config.settings import Settings
from app.core.dependencies import ServiceContainer, get_app_settings, get_service_container

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
async def root(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    """Root endpoint for basic health check."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "status": "running",
    }


@router.get("/health")
async def health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    container: ServiceContainer = Depends(get_service_container),
) -> Dict[str, Any]:
    """
    Report whether the vision and translation APIs are configured.

    The service is "healthy" when both are configured and "degraded" when
    only some of its endpoints can work.
    """
    services = await container.get_status()
    configured = [service["configured"] for service in services.values()]
    status = "healthy" if all(configured) else "degraded"
    if status != "healthy":
        logger.warning(f"Health check degraded: {services}")

    return {
        "status": status,
        "version": settings.app_version,
        "environment": settings.environment.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
        "error_statistics": request.app.state.error_handler.get_error_statistics(),
    }
