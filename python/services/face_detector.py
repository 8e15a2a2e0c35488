"""
Haar cascade face detector.

Runs a frontal pass and a profile pass over the raster, pools the
candidates and keeps the single best one (largest area, confidence as the
tie-break).

Cascades are loaded once at startup into a DetectorState. If any cascade is
missing or unreadable the state is degraded: detection is disabled and every call returns
a zero-confidence box covering the whole raster. This is logged once, at
startup, and exposed through FaceDetector.detection_enabled.
"""

import os
from typing import Any, Iterable, List, Optional, Tuple

import cv2
import numpy as np
from pydantic import BaseModel, ConfigDict

from core.exceptions import NoFaceDetectedError
from core.logging import get_logger
from models.domain.face import BoundingBox
from services.image_codec import to_grayscale

logger = get_logger(__name__)

# (pass name, cascade file) in execution order
CASCADE_FILES: Tuple[Tuple[str, str], ...] = (
    ("frontal", "haarcascade_frontalface_default.xml"),
    ("profile", "haarcascade_profileface.xml"),
)

RAW_CONFIDENCE = 1.0


class DetectorPass(BaseModel):
    """One loaded cascade."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    classifier: Any


class DetectorState(BaseModel):
    """Loaded-vs-degraded detector assets, captured once at startup."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    ready: bool
    passes: Tuple[DetectorPass, ...] = ()

    @classmethod
    def degraded(cls) -> "DetectorState":
        return cls(ready=False, passes=())


def _default_cascade_dir() -> Optional[str]:
    data = getattr(cv2, "data", None)
    return getattr(data, "haarcascades", None)


def find_cascade(filename: str, search_dirs: Iterable[Optional[str]]) -> Optional[str]:
    """First existing path for filename across search_dirs (None entries skipped)."""
    for directory in search_dirs:
        if not directory:
            continue
        path = os.path.join(directory, filename)
        if os.path.isfile(path):
            return path
    return None


def load_detector_state(cascade_dir: Optional[str] = None) -> DetectorState:
    """
    Load every cascade in CASCADE_FILES.

    Each file is looked up in cascade_dir first, then in OpenCV's bundled
    cascades. Any failure (missing file, empty or unreadable classifier)
    yields a degraded state instead of raising.

    Args:
        cascade_dir: Optional directory holding the XML files

    Returns:
        Ready state with all passes, or a degraded state if any cascade fails
    """
    search_dirs = (cascade_dir, _default_cascade_dir())
    passes: List[DetectorPass] = []

    for name, filename in CASCADE_FILES:
        path = find_cascade(filename, search_dirs)
        if path is None:
            logger.error(
                f"[FaceDetector] ❌ Cascade not found: {filename} (searched {[d for d in search_dirs if d]}). "
                f"Face detection DISABLED (degraded mode)"
            )
            return DetectorState.degraded()

        try:
            classifier = cv2.CascadeClassifier(path)
            if classifier.empty():
                raise ValueError("classifier is empty")
        except Exception as e:
            logger.error(
                f"[FaceDetector] ❌ Failed to load cascade {path}: {type(e).__name__}: {e}. "
                f"Face detection DISABLED (degraded mode)"
            )
            return DetectorState.degraded()

        passes.append(DetectorPass(name=name, classifier=classifier))
        logger.info(f"[FaceDetector] ✓ Loaded {name} cascade from {path}")

    return DetectorState(ready=True, passes=tuple(passes))


def select_best_face(candidates: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    """Largest area wins; equal areas fall back to confidence. None if empty."""
    return max(candidates, key=lambda box: (box.area, box.confidence), default=None)


def fallback_box(raster: np.ndarray) -> BoundingBox:
    """Whole-raster box used while detection is disabled."""
    height, width = raster.shape[:2]
    return BoundingBox(x=0, y=0, width=width, height=height, confidence=0.0)


class FaceDetector:
    """
    Stateless after construction. Safe to share between concurrent requests.
    """

    def __init__(
        self,
        state: DetectorState,
        min_face_size: int = 80,
        scale_factor: float = 1.1,
        min_neighbors: int = 3,
    ):
        self.state = state
        self.min_face_size = min_face_size
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors

    @property
    def detection_enabled(self) -> bool:
        return self.state.ready

    def find_candidates(self, raster: np.ndarray) -> List[BoundingBox]:
        """Run every pass and pool the raw boxes."""
        gray = to_grayscale(raster)
        min_size = (self.min_face_size, self.min_face_size)
        candidates: List[BoundingBox] = []

        for detector_pass in self.state.passes:
            boxes = detector_pass.classifier.detectMultiScale(
                gray,
                scaleFactor=self.scale_factor,
                minNeighbors=self.min_neighbors,
                minSize=min_size,
            )
            for (x, y, w, h) in boxes:
                candidates.append(BoundingBox(
                    x=int(x), y=int(y), width=int(w), height=int(h),
                    confidence=RAW_CONFIDENCE
                ))
            logger.debug(f"[FaceDetector] {detector_pass.name} pass: {len(boxes)} candidate(s)")

        return candidates

    def detect_best_face(self, raster: np.ndarray, angle: Optional[str] = None) -> BoundingBox:
        """
        Best face box in the raster.

        Args:
            raster: Decoded image
            angle: Registration angle, named in the error when given

        Raises:
            NoFaceDetectedError: no pass produced a candidate
        """
        if not self.state.ready:
            return fallback_box(raster)

        best = select_best_face(self.find_candidates(raster))
        if best is None:
            if angle:
                raise NoFaceDetectedError(f"No face detected in {angle} angle image", angle=angle)
            raise NoFaceDetectedError()

        logger.debug(f"[FaceDetector] Best face: {best.x},{best.y} {best.width}x{best.height}")
        return best
