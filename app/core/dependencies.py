"""
Dependency injection setup for FastAPI.
Holds the services built from the application settings and exposes them as providers.
"""

from fastapi import Request
from typing import Optional
import logging

from app.config.settings import Settings
from app.services.menu_vision_service import MenuVisionService
from app.services.translation_task_client import TranslationTaskClient
from app.services.vision_client import BaseVisionClient, GeminiVisionClient


logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for the per-process services.

    Everything is stateless apart from read-only configuration, so the
    services are built eagerly and shared by all requests.
    """

    def __init__(
        self,
        settings: Settings,
        vision_client: Optional[BaseVisionClient] = None,
        task_client: Optional[TranslationTaskClient] = None,
    ):
        self.settings = settings
        self.vision_client = vision_client or GeminiVisionClient(settings.vision)
        self.vision_service = MenuVisionService(self.vision_client)
        self.task_client = task_client or TranslationTaskClient(settings.translation_api)
        logger.info("Service container initialized")

    async def get_status(self) -> dict:
        return {
            "vision": {
                "configured": await self.vision_client.health_check(),
                "model": self.settings.vision.model,
            },
            "translation_api": {
                "configured": self.settings.translation_api.is_configured,
            },
        }


def get_service_container(request: Request) -> ServiceContainer:
    return request.app.state.service_container


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_vision_service(request: Request) -> MenuVisionService:
    return get_service_container(request).vision_service


def get_task_client(request: Request) -> TranslationTaskClient:
    return get_service_container(request).task_client


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")
