"""
FastAPI application setup with dependency injection.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging
from typing import Optional

from app.api import health_router, task_router, vision_router
from app.config.settings import Settings, get_settings
from app.core.dependencies import ServiceContainer
from app.core.error_handlers import setup_error_handlers
from app.core.logging import configure_logging
from app.middleware import AuthenticationMiddleware, CORSEnvelopeMiddleware, RequestContextMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown; the services hold no resources that need closing."""
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        extra={'environment': settings.environment.value}
    )
    status = await app.state.service_container.get_status()
    for name, service in status.items():
        if not service["configured"]:
            logger.warning(f"{name} is not configured; its endpoints will return 500")

    yield

    logger.info("Application shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings (defaults to the environment-loaded settings)
        container: Prebuilt service container, mainly for tests

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level.value, settings.log_format)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.service_container = container or ServiceContainer(settings)

    setup_error_handlers(app, settings)

    # Last added runs first: CORS, then request context, then the authorization gate
    app.add_middleware(AuthenticationMiddleware, settings=settings)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(CORSEnvelopeMiddleware, settings=settings)

    app.include_router(health_router)
    app.include_router(vision_router)
    app.include_router(task_router)

    return app


# Create application instance
app = create_app()
