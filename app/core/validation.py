"""
Input validation utilities for multipart image submissions.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import UploadFile

from app.core.exceptions import ClientInputError, ImageTooLargeError, InvalidImageTypeError

# Task ids are forwarded into an upstream URL path
_TASK_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.:-]{1,128}$")


@dataclass
class ImageUpload:
    data: bytes
    content_type: str
    filename: str


def require_fields(**fields: Any) -> None:
    """
    Check that every named form field is present and, for text fields, non-blank.

    Raises:
        ClientInputError: listing all missing fields
    """
    missing = [
        name for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ClientInputError(
            f"Missing required parameters: {', '.join(missing)}",
            details={"missing": missing},
        )


async def read_image_upload(image: Optional[UploadFile], max_size_bytes: int) -> ImageUpload:
    """
    Validate and read an uploaded image.

    Args:
        image: Multipart file field (may be missing)
        max_size_bytes: Upper bound on the image size

    Returns:
        ImageUpload with the raw bytes

    Raises:
        ClientInputError: If the file is missing or empty
        InvalidImageTypeError: If the content type is not ``image/*``
        ImageTooLargeError: If the image exceeds the size limit
    """
    if image is None:
        raise ClientInputError("Missing required parameters: image", details={"missing": ["image"]})

    content_type = (image.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise InvalidImageTypeError(image.content_type)

    data = await image.read()
    if not data:
        raise ClientInputError("Image file is empty")
    if len(data) > max_size_bytes:
        raise ImageTooLargeError(len(data) / (1024 * 1024), max_size_bytes // (1024 * 1024))

    return ImageUpload(data=data, content_type=content_type, filename=image.filename or "image")


def validate_task_id(task_id: str) -> str:
    task_id = task_id.strip()
    if not _TASK_ID_PATTERN.match(task_id):
        raise ClientInputError("Invalid task ID", details={"task_id": task_id[:128]})
    return task_id
