"""
Vision-generation client.

Sends an image plus an instruction prompt to the Gemini image model and
returns the generated image together with any text the model produced.
Upstream failures are classified by the HTTP status code the SDK reports.
"""

import asyncio
import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.config.settings import VisionSettings
from app.core.exceptions import (
    NoImageGeneratedError,
    UpstreamAuthError,
    UpstreamConfigError,
    UpstreamRateLimitError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/png"


@dataclass
class VisionOutput:
    """Generated image (base64) and the aggregated text response."""
    image_mime_type: str
    image_base64: str
    text: Optional[str] = None

    @property
    def data_url(self) -> str:
        return f"data:{self.image_mime_type};base64,{self.image_base64}"


class BaseVisionClient(ABC):
    """Abstract vision-generation backend."""

    @abstractmethod
    async def generate(self, image: bytes, mime_type: str, prompt: str) -> VisionOutput:
        """Generate an image (and text) from an input image and a prompt"""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the backend is usable"""
        pass


def extract_vision_output(response: types.GenerateContentResponse) -> VisionOutput:
    """
    Pull the first inline image and the concatenated text out of a response.

    Model "thought" parts are ignored. A response without candidates, without
    content parts or without an image part is a failure, even if text came back.
    """
    candidates = response.candidates
    if not candidates:
        raise UpstreamServiceError("Failed to get a result from the vision model")

    content = candidates[0].content
    if not content or not content.parts:
        raise UpstreamServiceError("Invalid response format from the vision model")

    image: Optional[tuple] = None
    texts = []
    for part in content.parts:
        if part.thought:
            continue
        if part.inline_data is not None and part.inline_data.data:
            if image is None:
                data = part.inline_data.data
                encoded = data if isinstance(data, str) else base64.b64encode(data).decode("ascii")
                image = (part.inline_data.mime_type or DEFAULT_IMAGE_MIME_TYPE, encoded)
        elif part.text:
            texts.append(part.text)

    text = "".join(texts) or None
    if image is None:
        logger.warning(f"Vision model returned no image; text preview: {(text or '')[:200]!r}")
        raise NoImageGeneratedError(text)

    return VisionOutput(image_mime_type=image[0], image_base64=image[1], text=text)


def classify_api_error(exc: genai_errors.APIError) -> UpstreamServiceError:
    """Map an SDK error to a typed upstream error by its HTTP status code."""
    if exc.code == 429:
        return UpstreamRateLimitError(details=str(exc))
    if exc.code in (401, 403):
        return UpstreamAuthError(details=str(exc))
    return UpstreamServiceError(
        message=exc.message or "Vision processing failed",
        details=str(exc)
    )


class GeminiVisionClient(BaseVisionClient):
    """Google Gemini image model requesting both TEXT and IMAGE modalities."""

    def __init__(self, settings: VisionSettings, client: Optional[genai.Client] = None):
        self.settings = settings
        self.model = settings.model
        self.timeout_seconds = settings.timeout_seconds
        self.client = client
        if self.client is None and settings.api_key:
            self.client = genai.Client(
                api_key=settings.api_key,
                http_options=types.HttpOptions(timeout=int(settings.timeout_seconds * 1000)),
            )
        if self.client is None:
            logger.warning("Vision API key not configured. Set GEMINI_API_KEY or VISION_API_KEY.")

    async def generate(self, image: bytes, mime_type: str, prompt: str) -> VisionOutput:
        if self.client is None:
            raise UpstreamConfigError("VISION_API_KEY")

        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=image, mime_type=mime_type),
                    types.Part.from_text(text=prompt),
                ],
            )
        ]
        config = types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"])

        logger.info(f"Calling vision model {self.model} with {len(image)} byte image")
        try:
            # The SDK call is synchronous; keep it off the event loop
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.models.generate_content,
                    model=self.model,
                    contents=contents,
                    config=config,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError("Vision model", self.timeout_seconds) from e
        except genai_errors.APIError as e:
            logger.error(f"Vision API error {e.code}: {e.message}")
            raise classify_api_error(e) from e
        except Exception as e:
            logger.error(f"Vision model call failed: {e}", exc_info=True)
            raise UpstreamServiceError("Vision processing failed", details=str(e)) from e

        return extract_vision_output(response)

    async def health_check(self) -> bool:
        return self.client is not None
