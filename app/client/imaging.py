"""
Image pre-processing before upload.
"""

import io
import logging

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 1600
DEFAULT_QUALITY = 85


class ImageCompressionError(ValueError):
    """Raised when the input bytes are not a readable image."""


def compress_image(
    image_data: bytes,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    quality: int = DEFAULT_QUALITY,
) -> bytes:
    """
    Shrink a photo so its longest side is at most ``max_dimension`` and
    re-encode it as JPEG.

    Images already within the limit are only re-encoded. EXIF orientation is
    applied first so phone photos keep their rotation.

    Args:
        image_data: Raw image bytes (any format Pillow can read)
        max_dimension: Longest side in pixels after resizing
        quality: JPEG quality (1-95)

    Returns:
        JPEG bytes
    """
    try:
        image = Image.open(io.BytesIO(image_data))
        image.load()
    except (IOError, OSError, ValueError) as e:
        raise ImageCompressionError(f"Cannot read image: {e}") from e

    image = ImageOps.exif_transpose(image)
    if image.mode != "RGB":
        image = image.convert("RGB")

    original_size = image.size
    image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    output = io.BytesIO()
    image.save(output, format="JPEG", quality=quality, optimize=True)
    compressed = output.getvalue()

    logger.debug(
        f"Compressed image {original_size[0]}x{original_size[1]} -> "
        f"{image.size[0]}x{image.size[1]}, {len(image_data)} -> {len(compressed)} bytes"
    )
    return compressed
