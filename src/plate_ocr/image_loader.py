"""Input image validation and decoding.

Images reach the extractor as a file path, encoded bytes or an already
decoded numpy array. Anything that cannot be turned into a usable image is a
caller error and raises InvalidImageError; this is the only failure that
propagates out of plate extraction.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from .config_loader import ImageConfig
from .types import InvalidImageError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, bytearray, np.ndarray, "PlateImage"]


@dataclass
class PlateImage:
    """Decoded plate image with its original encoding.

    Attributes:
        array: Decoded image (H, W) or (H, W, C), dtype uint8.
        data: Original encoded bytes, None if built from an array.
        format: Encoded format ("jpeg", "png", "webp") or None.
    """

    array: np.ndarray
    data: Optional[bytes] = None
    format: Optional[str] = None

    @property
    def filename(self) -> str:
        extension = {"jpeg": "jpg"}.get(self.format or "png", self.format or "png")
        return f"plate.{extension}"

    def to_bytes(self) -> bytes:
        """Return encoded bytes for upload, encoding the array as PNG if needed."""
        if self.data is not None:
            return self.data
        ok, buffer = cv2.imencode(".png", self.array)
        if not ok:
            raise InvalidImageError("Failed to encode image as PNG")
        return buffer.tobytes()


def detect_format(data: bytes) -> Optional[str]:
    """Detect the encoded image format from its magic bytes.

    Returns:
        "jpeg", "png", "webp" or None if unrecognized.
    """
    if data[:3] == b"\xff\xd8\xff":
        return "jpeg"
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def load_image(source: ImageSource, config: Optional[ImageConfig] = None) -> PlateImage:
    """Validate and decode an input image.

    Args:
        source: File path, encoded bytes, numpy array or PlateImage.
        config: Validation limits, defaults to ImageConfig().

    Returns:
        PlateImage ready for OCR and upload.

    Raises:
        InvalidImageError: If the file is missing, the format is not allowed,
            the image is too large or it cannot be decoded.
    """
    config = config or ImageConfig()

    if isinstance(source, PlateImage):
        return source

    if isinstance(source, np.ndarray):
        return _from_array(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise InvalidImageError(f"Image file not found: {path}")
        size = path.stat().st_size
        if size > config.max_bytes:
            raise InvalidImageError(_too_large_message(size, config.max_bytes))
        data = path.read_bytes()
    elif isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        raise InvalidImageError(f"Unsupported image source type: {type(source).__name__}")

    if not data:
        raise InvalidImageError("Image data is empty")

    image_format = detect_format(data)
    if image_format is None or image_format not in config.allowed_formats:
        raise InvalidImageError("Please upload a valid image file (JPEG, PNG, or WebP).")

    if len(data) > config.max_bytes:
        raise InvalidImageError(_too_large_message(len(data), config.max_bytes))

    try:
        array = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise InvalidImageError(f"Failed to decode image data: {e}") from e
    if array is None or array.size == 0:
        raise InvalidImageError("Failed to decode image data")

    logger.debug(f"Loaded {image_format} image: shape={array.shape}, bytes={len(data)}")
    return PlateImage(array=array, data=data, format=image_format)


def _too_large_message(size: int, limit: int) -> str:
    return f"Image file is too large ({size} bytes, limit {limit})."


def _from_array(array: np.ndarray) -> PlateImage:
    if array.size == 0:
        raise InvalidImageError("Image array is empty")
    if array.ndim not in (2, 3):
        raise InvalidImageError(f"Invalid image shape: {array.shape}")
    if array.dtype != np.uint8:
        raise InvalidImageError(f"Invalid image dtype: {array.dtype}, expected uint8")
    return PlateImage(array=array)
