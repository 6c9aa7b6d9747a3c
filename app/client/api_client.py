"""
Async HTTP client for the menu lens API.
"""

import logging
from typing import Any, Callable, List, Optional, TypeVar

import httpx
from pydantic import ValidationError

from app.schemas.task import TaskCreated, TranslationTask
from app.schemas.translation import LanguageOption, VisionResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MenuLensAPIError(Exception):
    """A call to the menu lens API failed; ``status_code`` is None for network errors."""

    def __init__(self, status_code: Optional[int], message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_code = error_code


class MenuLensClient:
    """
    Client for the menu lens endpoints, sending the caller's bearer token.

    Args:
        base_url: Server base URL
        token: Bearer token issued by the identity provider
        timeout: Request timeout in seconds; vision calls can take minutes
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 150.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def translate(
        self,
        image: bytes,
        to_lang: str,
        from_lang: Optional[str] = None,
        content_type: str = "image/jpeg",
        filename: str = "menu.jpg",
    ) -> VisionResult:
        data = {"toLang": to_lang}
        if from_lang:
            data["fromLang"] = from_lang
        return await self._send(
            "POST", "/api/translate", VisionResult.model_validate,
            data=data, files={"image": (filename, image, content_type)},
        )

    async def recognize(
        self,
        image: bytes,
        to_lang: str,
        content_type: str = "image/jpeg",
        filename: str = "food.jpg",
    ) -> VisionResult:
        return await self._send(
            "POST", "/api/recognize", VisionResult.model_validate,
            data={"toLang": to_lang}, files={"image": (filename, image, content_type)},
        )

    async def upload(
        self,
        image: bytes,
        to_lang: str,
        from_lang: Optional[str] = None,
        user_id: Optional[str] = None,
        content_type: str = "image/jpeg",
        filename: str = "document.jpg",
    ) -> TaskCreated:
        data = {"toLang": to_lang}
        if from_lang:
            data["fromLang"] = from_lang
        if user_id:
            data["userId"] = user_id
        return await self._send(
            "POST", "/api/upload", TaskCreated.model_validate,
            data=data, files={"image": (filename, image, content_type)},
        )

    async def get_task(self, task_id: str) -> TranslationTask:
        return await self._send("GET", f"/api/task/{task_id}", TranslationTask.model_validate)

    async def languages(self) -> List[LanguageOption]:
        return await self._send(
            "GET", "/api/languages",
            lambda body: [LanguageOption.model_validate(item) for item in body],
        )

    async def _send(self, method: str, path: str, parse: Callable[[Any], T], **kwargs) -> T:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request {method} {path} failed: {e}")
            raise MenuLensAPIError(None, f"Could not reach the server: {e}") from e

        if response.is_success:
            try:
                return parse(response.json())
            except (ValueError, TypeError, ValidationError) as e:
                logger.warning(f"{method} {path} returned an unreadable {response.status_code} body: {e}")
                raise MenuLensAPIError(
                    response.status_code,
                    f"Unexpected response from the server for {method} {path}",
                    "INVALID_RESPONSE",
                ) from e

        message = f"HTTP {response.status_code}"
        error_code = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("error") or message
                error_code = body.get("errorCode")
        except ValueError:
            if response.text:
                message = f"{message}: {response.text[:200]}"

        logger.warning(f"{method} {path} returned {response.status_code}: {message}")
        raise MenuLensAPIError(response.status_code, message, error_code)
