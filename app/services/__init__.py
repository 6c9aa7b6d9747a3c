# Business logic services

from .menu_vision_service import MenuVisionService
from .translation_task_client import TranslationTaskClient, build_correlation_id
from .vision_client import BaseVisionClient, GeminiVisionClient, VisionOutput

__all__ = [
    "MenuVisionService",
    "TranslationTaskClient",
    "build_correlation_id",
    "BaseVisionClient",
    "GeminiVisionClient",
    "VisionOutput",
]
