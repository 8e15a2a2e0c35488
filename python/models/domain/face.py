"""
Face domain model.
Bounding boxes, the five registration angles and the remote recognition models.
"""

from enum import Enum
from typing import Dict, List, Mapping, Optional
from pydantic import BaseModel, Field

from core.exceptions import ValidationError, InvalidModelError


class BoundingBox(BaseModel):
    """Face bounding box in raster pixel coordinates."""

    x: int = Field(..., ge=0, description="Left edge X coordinate")
    y: int = Field(..., ge=0, description="Top edge Y coordinate")
    width: int = Field(..., ge=0, description="Box width")
    height: int = Field(..., ge=0, description="Box height")
    confidence: float = Field(1.0, ge=0, description="Detector score (0 for the degraded fallback)")

    @property
    def x2(self) -> int:
        """Right edge X coordinate (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge Y coordinate (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> int:
        """Bounding box area. Used only for ranking candidates."""
        return self.width * self.height

    @classmethod
    def from_xyxy(cls, x1: int, y1: int, x2: int, y2: int, confidence: float = 1.0) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) format."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1, confidence=confidence)

    class Config:
        frozen = True  # Immutable


class DetectionResult(BaseModel):
    """Best face box plus its encoded crop. Never persisted."""

    box: BoundingBox
    cropped_image: bytes


# === Angles ===

class FaceAngle(str, Enum):
    """The five poses required for registration, in submission order."""

    FRONT = "front"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"

    @classmethod
    def from_key(cls, key: str) -> "FaceAngle":
        """Case-insensitive lookup. Unknown keys are a caller error."""
        normalized = (key or "").strip().lower()
        for angle in cls:
            if angle.value == normalized:
                return angle
        raise ValidationError(
            f"Invalid angle '{key}'. Must be one of: {', '.join(a.value for a in cls)}",
            field="angle"
        )


def validate_angle_set(images: Mapping[str, Optional[bytes]]) -> Dict[FaceAngle, bytes]:
    """
    Check that all five angles are present with non-empty payloads.

    Args:
        images: Angle name (any case) -> raw image bytes

    Returns:
        Dict ordered front, left, right, up, down

    Raises:
        ValidationError: unknown angle key, or listing every missing/empty angle
    """
    provided: Dict[FaceAngle, Optional[bytes]] = {}
    for key, payload in images.items():
        provided[FaceAngle.from_key(key)] = payload

    missing: List[str] = [
        angle.value for angle in FaceAngle
        if not provided.get(angle)
    ]
    if missing:
        error = ValidationError(
            f"Missing required face angles: {', '.join(missing)}. All 5 angles must be provided.",
            field=missing[0]
        )
        error.details["missing"] = missing
        raise error

    return {angle: provided[angle] for angle in FaceAngle}


# === Recognition models ===

class RecognitionModel(str, Enum):
    """Backends supported by the remote recognition service."""

    MAGFACE = "magface"
    QMAGFACE = "qmagface"  # quality-aware, accepts min_quality

    @classmethod
    def allowed_values(cls) -> List[str]:
        return [m.value for m in cls]

    @classmethod
    def normalize(cls, value: Optional[str], default: Optional[str] = None) -> str:
        """
        Trim and lowercase a model identifier, substituting the default when blank.

        Idempotent: normalize(normalize(x)) == normalize(x).

        Raises:
            InvalidModelError: value (or default) is not a supported model
        """
        if value is None or not str(value).strip():
            value = default
        if value is None:
            raise InvalidModelError("", cls.allowed_values())

        normalized = str(value.value if isinstance(value, cls) else value).strip().lower()
        if normalized not in cls.allowed_values():
            raise InvalidModelError(str(value), cls.allowed_values())
        return normalized

    @classmethod
    def is_quality_aware(cls, model: str) -> bool:
        return model == cls.QMAGFACE.value
