"""
Image codec: uploaded bytes <-> BGR raster (numpy), JPEG for transport.

OpenCV decodes the common formats; Pillow is the fallback for formats
cv2.imdecode cannot read (GIF, some WebP/BMP variants).
"""

import io

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from core.exceptions import AppException, DecodeError
from core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_JPEG_QUALITY = 95


def decode_image(data: bytes, field: str = "image") -> np.ndarray:
    """
    Decode raw upload bytes into a BGR raster.

    Args:
        data: Raw image bytes
        field: Field name reported in the error (e.g. the angle)

    Returns:
        np.ndarray of shape (H, W, 3), dtype uint8

    Raises:
        DecodeError: bytes are empty or not an image
    """
    if not data:
        raise DecodeError("Empty image data", field=field)

    buffer = np.frombuffer(data, dtype=np.uint8)
    raster = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if raster is not None:
        return raster

    try:
        image = Image.open(io.BytesIO(data))
        img_array = np.array(image.convert('RGB'))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"[ImageCodec] Pillow could not decode {field}: {e}")
        raise DecodeError(f"Failed to decode image: {field}", field=field) from e

    return cv2.cvtColor(img_array, cv2.COLOR_RGB2BGR)


def to_grayscale(raster: np.ndarray) -> np.ndarray:
    """Single-channel view of a 1, 3 or 4 channel raster."""
    if raster.ndim == 2:
        return raster
    channels = raster.shape[2]
    if channels == 1:
        return raster[:, :, 0]
    if channels == 4:
        return cv2.cvtColor(raster, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(raster, cv2.COLOR_BGR2GRAY)


def encode_jpeg(raster: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode a raster as JPEG.

    Alpha is dropped; grayscale is encoded as-is.
    """
    if raster.ndim == 3 and raster.shape[2] == 4:
        raster = cv2.cvtColor(raster, cv2.COLOR_BGRA2BGR)
    elif raster.ndim == 3 and raster.shape[2] == 1:
        raster = raster[:, :, 0]

    ok, encoded = cv2.imencode(".jpg", raster, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise AppException(
            "Failed to encode image as JPEG",
            code="ENCODE_ERROR",
            status_code=500
        )
    return encoded.tobytes()
