"""
Face cropper: margin-expanded, raster-clamped crop re-encoded as JPEG.
"""

from typing import Optional

import numpy as np

from models.domain.face import BoundingBox, DetectionResult
from services.face_detector import FaceDetector
from services.image_codec import decode_image, encode_jpeg, DEFAULT_JPEG_QUALITY
from utils.geometry import compute_crop_rect


class FaceCropper:
    """Crops with independent horizontal/vertical margins."""

    def __init__(
        self,
        margin_horizontal: float = 0.2,
        margin_vertical: float = 0.3,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ):
        self.margin_horizontal = margin_horizontal
        self.margin_vertical = margin_vertical
        self.jpeg_quality = jpeg_quality

    def crop_rect(self, raster: np.ndarray, box: BoundingBox) -> BoundingBox:
        height, width = raster.shape[:2]
        return compute_crop_rect(box, width, height, self.margin_horizontal, self.margin_vertical)

    def extract(self, raster: np.ndarray, box: BoundingBox) -> np.ndarray:
        """Cropped region as its own contiguous buffer (not a view of the raster)."""
        rect = self.crop_rect(raster, box)
        region = raster[rect.y:rect.y2, rect.x:rect.x2]
        return np.ascontiguousarray(region).copy()

    def crop(self, raster: np.ndarray, box: BoundingBox) -> bytes:
        """Crop and encode as JPEG."""
        return encode_jpeg(self.extract(raster, box), self.jpeg_quality)


def extract_face(
    data: bytes,
    detector: FaceDetector,
    cropper: FaceCropper,
    angle: Optional[str] = None,
) -> DetectionResult:
    """Decode, detect the best face and crop it. CPU-bound; run off the event loop."""
    raster = decode_image(data, field=angle or "image")
    box = detector.detect_best_face(raster, angle=angle)
    return DetectionResult(box=box, cropped_image=cropper.crop(raster, box))
