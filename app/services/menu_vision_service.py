"""
Menu vision service: in-place menu translation and food recognition.

Both operations send the photo and a task-specific prompt to the vision
model and return the generated image as a data URL.
"""

import logging
from typing import Optional

from app.schemas.translation import VisionResult
from app.services.prompts import build_recognize_prompt, build_translate_prompt
from app.services.text_parsing import extract_json_array
from app.services.vision_client import BaseVisionClient

logger = logging.getLogger(__name__)


class MenuVisionService:
    """Builds prompts, calls the vision client and shapes the results."""

    def __init__(self, vision_client: BaseVisionClient):
        self.vision_client = vision_client

    async def translate(
        self,
        image: bytes,
        mime_type: str,
        to_lang: str,
        from_lang: Optional[str] = None,
    ) -> VisionResult:
        """
        Translate the text in a menu photo in place.

        Args:
            image: Raw image bytes
            mime_type: Image MIME type (``image/*``)
            to_lang: Target language display name
            from_lang: Source language display name, detected by the model if None

        Returns:
            VisionResult with the translated image and the model's text
        """
        prompt = build_translate_prompt(to_lang, from_lang)
        output = await self.vision_client.generate(image, mime_type, prompt)
        logger.info(f"Menu translated into {to_lang}")
        return VisionResult(image_data_url=output.data_url, text_response=output.text)

    async def recognize(self, image: bytes, mime_type: str, to_lang: str) -> VisionResult:
        """
        Label the food items in a photo and list their names.

        The food list is a best-effort extra: unparseable text yields an
        empty list, never a failure.
        """
        prompt = build_recognize_prompt(to_lang)
        output = await self.vision_client.generate(image, mime_type, prompt)

        food_list = extract_json_array(output.text)
        if food_list is None:
            logger.info("Could not parse a food list from the model text; returning an empty list")
            food_list = []

        logger.info(f"Recognized {len(food_list)} food items in {to_lang}")
        return VisionResult(
            image_data_url=output.data_url,
            text_response=output.text,
            food_list=food_list,
        )
