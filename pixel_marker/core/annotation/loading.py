"""
Upload validation and image decoding.

Uploads are checked before any decoding happens; a rejected or
undecodable file never touches session state.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from pixel_marker.exceptions import ImageDecodeError, InvalidUploadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def guess_content_type(filename: str) -> Optional[str]:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type


def validate_upload(
    filename: str,
    size: int,
    content_type: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """
    Check that an upload looks like an image of acceptable size.

    Args:
        filename: Original file name
        size: Size in bytes
        content_type: MIME type reported by the client, guessed from
            the file name when missing
        max_bytes: Largest accepted size

    Raises:
        InvalidUploadError: If the type or size is not acceptable
    """
    if content_type is None:
        content_type = guess_content_type(filename)

    if not content_type or not content_type.startswith("image/"):
        raise InvalidUploadError(
            f"{filename}: not an image file (type {content_type or 'unknown'})"
        )

    if size <= 0:
        raise InvalidUploadError(f"{filename}: file is empty")

    if size > max_bytes:
        raise InvalidUploadError(
            f"{filename}: {size} bytes exceeds the {max_bytes} byte limit"
        )


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into an RGB array.

    Raises:
        ImageDecodeError: If the bytes are not a decodable image
    """
    buffer = np.frombuffer(data, np.uint8)
    if buffer.size == 0:
        raise ImageDecodeError("No image data")

    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError("Failed to decode image")

    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def read_image(path: Path, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> np.ndarray:
    """Validate and decode an image file from disk."""
    path = Path(path)
    data = path.read_bytes()
    validate_upload(path.name, len(data), max_bytes=max_bytes)
    logger.debug("Decoding %s (%d bytes)", path, len(data))
    return decode_image(data)
