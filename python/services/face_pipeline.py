"""
Face pipeline facade.

Owns the detector, cropper, remote client and both orchestrators, and is
the single service the routers depend on.

Structure:
- services/image_codec.py    decode / JPEG encode
- services/face_detector.py  Haar cascades, best-face selection, degraded mode
- services/face_cropper.py   margin crop
- services/face_api_client.py remote recognition service
- services/registration.py   5-angle registration state machine
- services/recognition.py    single-probe recognition
- services/face_database.py  remote database admin
"""

import asyncio
import base64
import os
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from core.config import Settings
from core.logging import get_logger
from models.domain.face import DetectionResult
from services.face_api_client import FaceApiClient
from services.face_cropper import FaceCropper, extract_face
from services.face_database import FaceDatabaseService
from services.face_detector import DetectorState, FaceDetector, load_detector_state
from services.recognition import RecognitionOrchestrator
from services.registration import RegistrationOrchestrator
from utils.files import sanitize_filename

logger = get_logger(__name__)


class FacePipelineService:

    def __init__(
        self,
        detector: FaceDetector,
        cropper: FaceCropper,
        client: FaceApiClient,
        default_model: str = "magface",
        default_threshold: float = 0.5,
        default_min_quality: Optional[int] = 1,
        crop_output_dir: str = "images",
    ):
        self.detector = detector
        self.cropper = cropper
        self.client = client
        self.crop_output_dir = crop_output_dir

        self.registration = RegistrationOrchestrator(
            detector, cropper, client,
            default_model=default_model,
            default_min_quality=default_min_quality,
        )
        self.recognition = RecognitionOrchestrator(
            detector, cropper, client,
            default_model=default_model,
            default_threshold=default_threshold,
        )
        self.database = FaceDatabaseService(client, default_model=default_model)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        state: Optional[DetectorState] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "FacePipelineService":
        """Build the whole pipeline from settings. Loads cascades unless a state is given."""
        if state is None:
            state = load_detector_state(settings.cascade_dir)

        detector = FaceDetector(
            state,
            min_face_size=settings.min_face_size,
            scale_factor=settings.scale_factor,
            min_neighbors=settings.min_neighbors,
        )
        cropper = FaceCropper(
            margin_horizontal=settings.margin_horizontal,
            margin_vertical=settings.margin_vertical,
            jpeg_quality=settings.jpeg_quality,
        )
        client = FaceApiClient(settings.face_api_base_url, timeout=settings.face_api_timeout, transport=transport)

        return cls(
            detector, cropper, client,
            default_model=settings.default_model,
            default_threshold=settings.default_threshold,
            default_min_quality=settings.default_min_quality,
            crop_output_dir=settings.crop_output_dir,
        )

    @property
    def detection_enabled(self) -> bool:
        return self.detector.detection_enabled

    async def detect(
        self,
        image: bytes,
        filename: Optional[str] = None,
        include_crop: bool = False,
    ) -> Dict[str, Any]:
        """
        Diagnostic: best face box, optionally with the Base64 crop saved to disk.

        A failed disk write is logged and reported as saved_path=None.
        """
        loop = asyncio.get_running_loop()
        detection: DetectionResult = await loop.run_in_executor(
            None, extract_face, image, self.detector, self.cropper
        )

        result: Dict[str, Any] = {
            "face_detected": True,
            "detection_enabled": self.detection_enabled,
            "bounding_box": detection.box.model_dump(),
        }
        if include_crop:
            result["cropped_image"] = base64.b64encode(detection.cropped_image).decode("ascii")
            result["cropped_size_bytes"] = len(detection.cropped_image)
            result["saved_path"] = self.save_crop(detection.cropped_image, filename)

        return result

    def save_crop(self, data: bytes, filename: Optional[str]) -> Optional[str]:
        """Write a diagnostic crop as detect_crop_<name>_<timestamp>_<id>.jpg."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        name = f"detect_crop_{sanitize_filename(filename)}_{timestamp}_{uuid.uuid4().hex[:8]}.jpg"
        path = os.path.join(self.crop_output_dir, name)
        try:
            os.makedirs(self.crop_output_dir, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.warning(f"[FacePipeline] Could not save crop to {path}: {e}")
            return None

        logger.info(f"[FacePipeline] Saved detect crop: {path}")
        return os.path.abspath(path)
