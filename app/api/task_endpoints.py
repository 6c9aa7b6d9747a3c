"""
Asynchronous translation task endpoints.

- POST /api/upload: create a translation task for an image
- GET /api/task/{task_id}: fetch the normalized status of a task

Both relay to the third-party translation API with the server-held key; the
caller's bearer token is only checked by the authorization gate.
"""

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from typing import Optional
import logging

from app.config.settings import Settings
from app.core.dependencies import get_app_settings, get_request_id, get_task_client
from app.core.validation import read_image_upload, require_fields, validate_task_id
from app.schemas.base import ErrorEnvelope
from app.schemas.task import TaskCreated, TranslationTask
from app.services.translation_task_client import TranslationTaskClient, build_correlation_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["translation-tasks"])


@router.post(
    "/upload",
    response_model=TaskCreated,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorEnvelope, "description": "Missing parameters or invalid image type"},
        401: {"model": ErrorEnvelope, "description": "Missing or invalid authorization"},
        500: {"model": ErrorEnvelope, "description": "Translation API not configured"},
    },
)
async def upload_for_translation(
    request: Request,
    image: Optional[UploadFile] = File(None, description="Image or document page to translate"),
    to_lang: Optional[str] = Form(None, alias="toLang"),
    target_lang: Optional[str] = Form(None, alias="targetLang"),
    from_lang: Optional[str] = Form(None, alias="fromLang"),
    user_id: Optional[str] = Form(None, alias="userId"),
    task_client: TranslationTaskClient = Depends(get_task_client),
    settings: Settings = Depends(get_app_settings),
    request_id: str = Depends(get_request_id),
) -> TaskCreated:
    """
    Create a translation task and return its id; the caller polls
    ``/api/task/{taskId}`` for the result. ``targetLang`` is accepted as an
    alias of ``toLang``. The user id defaults to the token subject.
    """
    target = to_lang or target_lang
    require_fields(image=image, toLang=target)
    upload = await read_image_upload(image, settings.upload.max_image_size_bytes)

    user = (user_id or "").strip() or getattr(request.state, "user_id", None) or "anonymous"
    correlation_id = build_correlation_id(user)

    logger.info(
        f"Upload request {request_id}",
        extra={
            'request_id': request_id,
            'correlation_id': correlation_id,
            'to_lang': target,
            'from_lang': from_lang,
            'image_size': len(upload.data),
        }
    )

    return await task_client.create_task(
        image=upload.data,
        filename=upload.filename,
        content_type=upload.content_type,
        to_lang=target.strip(),
        from_lang=from_lang.strip() if from_lang and from_lang.strip() else None,
        correlation_id=correlation_id,
    )


@router.get(
    "/task/{task_id}",
    response_model=TranslationTask,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorEnvelope, "description": "Invalid task ID"},
        401: {"model": ErrorEnvelope, "description": "Missing or invalid authorization"},
    },
)
async def get_task_status(
    task_id: str,
    task_client: TranslationTaskClient = Depends(get_task_client),
) -> TranslationTask:
    """Return ``{taskId, status, progress, translatedFileUrl?, error?}``."""
    return await task_client.get_task(validate_task_id(task_id))
