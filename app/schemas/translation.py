from pydantic import Field
from typing import List, Optional

from app.schemas.base import CamelModel


class LanguageOption(CamelModel):
    code: str
    name: str


class VisionResult(CamelModel):
    """Synchronous result of /api/translate and /api/recognize."""
    success: bool = True
    image_data_url: str = Field(alias="imageDataUrl")
    text_response: Optional[str] = Field(default=None, alias="textResponse")
    food_list: Optional[List[str]] = Field(default=None, alias="foodList")
