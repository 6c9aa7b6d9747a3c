"""
Client for the third-party asynchronous translation task API.

Tasks are created with ``POST {base}/api/v1/translations`` and polled with
``GET {base}/api/v1/translations/{task_id}``, always with the server-held
API key. Upstream HTTP failures are relayed with their original status code.
"""

import base64
import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.config.settings import TranslationApiSettings, UploadEncoding
from app.core.exceptions import (
    UpstreamConfigError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)
from app.schemas.task import TaskCreated, TranslationTask
from app.services.task_status import normalize_status, normalize_task

logger = logging.getLogger(__name__)

SERVICE_NAME = "Translation service"


def build_correlation_id(user_id: str, now: Optional[float] = None) -> str:
    """Client-side correlation id: ``menu_<userId>_<epoch millis>``."""
    millis = int((now if now is not None else time.time()) * 1000)
    return f"menu_{user_id}_{millis}"


class TranslationTaskClient:
    """Creates translation tasks and fetches their status."""

    def __init__(self, settings: TranslationApiSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.base_url = settings.base_url
        self.api_key = settings.api_key
        self.timeout = settings.timeout_seconds
        self._transport = transport

        if not settings.is_configured:
            logger.warning(
                "Translation API not configured. "
                "Set TRANSLATION_API_BASE_URL and TRANSLATION_API_KEY."
            )

    def _client(self) -> httpx.AsyncClient:
        if not self.base_url:
            raise UpstreamConfigError("TRANSLATION_API_BASE_URL")
        if not self.api_key:
            raise UpstreamConfigError("TRANSLATION_API_KEY")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def create_task(
        self,
        image: bytes,
        filename: str,
        content_type: str,
        to_lang: str,
        from_lang: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> TaskCreated:
        """
        Create an asynchronous translation task for an image.

        Args:
            image: Raw image bytes
            filename: Original upload filename
            content_type: Image MIME type
            to_lang: Target language as received from the caller
            from_lang: Optional source language
            correlation_id: Client-side id sent along with the task

        Returns:
            TaskCreated with the upstream task id and canonical status
        """
        fields: Dict[str, Any] = {
            "toLang": to_lang,
            "fastCreation": self.settings.fast_creation,
            "ocrTranslation": self.settings.ocr_translation,
        }
        if from_lang:
            fields["fromLang"] = from_lang
        if correlation_id:
            fields["clientTaskId"] = correlation_id

        if self.settings.upload_encoding == UploadEncoding.JSON:
            encoded = base64.b64encode(image).decode("ascii")
            request_kwargs = {"json": {**fields, "file": f"data:{content_type};base64,{encoded}"}}
        else:
            form = {k: str(v).lower() if isinstance(v, bool) else v for k, v in fields.items()}
            request_kwargs = {"data": form, "files": {"file": (filename, image, content_type)}}

        logger.info(
            f"Creating translation task ({self.settings.upload_encoding.value}, {len(image)} bytes)",
            extra={"correlation_id": correlation_id, "to_lang": to_lang, "from_lang": from_lang},
        )
        data = await self._request("POST", "/api/v1/translations", **request_kwargs)

        task_id = data.get("taskId") or data.get("id")
        if not task_id:
            raise UpstreamServiceError(
                "Translation service response did not include a task id",
                status_code=502,
                details=data,
            )

        created = TaskCreated(
            task_id=str(task_id),
            status=normalize_status(data.get("status")),
            correlation_id=correlation_id,
        )
        logger.info(f"Translation task {created.task_id} created with status {created.status.value}")
        return created

    async def get_task(self, task_id: str) -> TranslationTask:
        """Fetch and normalize the status of a task."""
        data = await self._request(
            "GET",
            f"/api/v1/translations/{task_id}",
            headers={"Content-Type": "application/json"},
        )
        task = normalize_task(data, task_id=task_id)
        logger.debug(f"Task {task.task_id}: {task.status.value} {task.progress}%")
        return task

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{SERVICE_NAME} timed out on {method} {path}")
            raise UpstreamTimeoutError(SERVICE_NAME, self.timeout) from e
        except httpx.RequestError as e:
            logger.error(f"{SERVICE_NAME} unreachable on {method} {path}: {e}")
            raise UpstreamServiceError(
                "Translation service unreachable",
                status_code=502,
                details=str(e),
            ) from e

        if not response.is_success:
            raise self._relay_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(
                "Translation service returned an invalid response",
                status_code=502,
                details=response.text[:500],
            ) from e

    @staticmethod
    def _relay_error(response: httpx.Response) -> UpstreamServiceError:
        """Keep the upstream status code and its message where one can be found."""
        status = response.status_code
        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message") or body.get("error")
                if isinstance(message, dict):
                    message = message.get("message")
        except ValueError:
            text = response.text.strip()
            if text:
                message = f"HTTP {status}: {text[:500]}"

        logger.warning(f"{SERVICE_NAME} returned HTTP {status}: {message}")
        return UpstreamServiceError(
            message=str(message) if message else f"Translation service call failed (HTTP {status})",
            status_code=status,
            details={"upstream_status": status},
        )
