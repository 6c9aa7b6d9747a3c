from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case attributes."""
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ErrorEnvelope(CamelModel):
    success: bool = False
    error: str
    error_code: str = Field(alias="errorCode")
    details: Optional[Any] = None
    text_response: Optional[str] = Field(default=None, alias="textResponse")
    request_id: Optional[str] = Field(default=None, alias="requestId")
