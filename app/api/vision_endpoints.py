"""
Vision API endpoints.

- POST /api/translate: translate the text of a menu photo in place
- POST /api/recognize: label the food in a photo and list the food names
- GET /api/languages: supported output languages
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional
import logging

from app.config.settings import Settings
from app.core.dependencies import get_app_settings, get_request_id, get_vision_service
from app.core.validation import read_image_upload, require_fields
from app.schemas.base import ErrorEnvelope
from app.schemas.translation import LanguageOption, VisionResult
from app.services.languages import SUPPORTED_LANGUAGES, resolve_language_name
from app.services.menu_vision_service import MenuVisionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["vision"])

ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope, "description": "Missing parameters or invalid image type"},
    401: {"model": ErrorEnvelope, "description": "Missing or invalid authorization"},
    413: {"model": ErrorEnvelope, "description": "Image too large"},
    429: {"model": ErrorEnvelope, "description": "Vision API rate limit exceeded"},
    500: {"model": ErrorEnvelope, "description": "Configuration error or no image generated"},
    504: {"model": ErrorEnvelope, "description": "Vision API timed out"},
}


@router.post(
    "/translate",
    response_model=VisionResult,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def translate_menu(
    image: Optional[UploadFile] = File(None, description="Menu photo (image/*)"),
    to_lang: Optional[str] = Form(None, alias="toLang"),
    from_lang: Optional[str] = Form(None, alias="fromLang"),
    vision_service: MenuVisionService = Depends(get_vision_service),
    settings: Settings = Depends(get_app_settings),
    request_id: str = Depends(get_request_id),
) -> VisionResult:
    """
    Translate a menu photo into the target language, rendering the
    translation onto the image. The source language is detected when
    ``fromLang`` is omitted.
    """
    require_fields(image=image, toLang=to_lang)
    upload = await read_image_upload(image, settings.upload.max_image_size_bytes)
    target = resolve_language_name(to_lang)
    source = resolve_language_name(from_lang) if from_lang and from_lang.strip() else None

    logger.info(
        f"Translate request {request_id}",
        extra={
            'request_id': request_id,
            'to_lang': target,
            'from_lang': source or 'auto-detect',
            'image_size': len(upload.data),
            'image_content_type': upload.content_type,
        }
    )

    return await vision_service.translate(upload.data, upload.content_type, target, source)


@router.post(
    "/recognize",
    response_model=VisionResult,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def recognize_food(
    image: Optional[UploadFile] = File(None, description="Food photo (image/*)"),
    to_lang: Optional[str] = Form(None, alias="toLang"),
    vision_service: MenuVisionService = Depends(get_vision_service),
    settings: Settings = Depends(get_app_settings),
    request_id: str = Depends(get_request_id),
) -> VisionResult:
    """
    Label every food item in a photo and return the labeled image plus
    ``foodList``, the food names in the target language.
    """
    require_fields(image=image, toLang=to_lang)
    upload = await read_image_upload(image, settings.upload.max_image_size_bytes)
    target = resolve_language_name(to_lang)

    logger.info(
        f"Recognize request {request_id}",
        extra={
            'request_id': request_id,
            'to_lang': target,
            'image_size': len(upload.data),
            'image_content_type': upload.content_type,
        }
    )

    return await vision_service.recognize(upload.data, upload.content_type, target)


@router.get("/languages", response_model=List[LanguageOption])
async def list_languages() -> List[LanguageOption]:
    return SUPPORTED_LANGUAGES
