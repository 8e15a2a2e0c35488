"""
Recognition orchestrator: one probe image -> best face crop -> remote identify.

The remote service decides identity; this layer only lifts name and
confidence out of its payload.
"""

import asyncio
from typing import Any, Dict, Optional

from core.logging import get_logger
from models.domain.face import RecognitionModel
from models.domain.registration import RecognitionResult
from services.face_api_client import FaceApiClient
from services.face_cropper import FaceCropper, extract_face
from services.face_detector import FaceDetector

logger = get_logger(__name__)


class RecognitionOrchestrator:

    def __init__(
        self,
        detector: FaceDetector,
        cropper: FaceCropper,
        client: FaceApiClient,
        default_model: str = RecognitionModel.MAGFACE.value,
        default_threshold: float = 0.5,
    ):
        self.detector = detector
        self.cropper = cropper
        self.client = client
        self.default_model = default_model
        self.default_threshold = default_threshold

    async def recognize(
        self,
        image: bytes,
        model: Optional[str] = None,
        threshold: Optional[float] = None,
    ) -> RecognitionResult:
        """
        Identify the best face in a probe image.

        Raises:
            InvalidModelError, DecodeError, NoFaceDetectedError, RemoteServiceError
        """
        model = RecognitionModel.normalize(model, self.default_model)
        if threshold is None:
            threshold = self.default_threshold

        loop = asyncio.get_running_loop()
        detection = await loop.run_in_executor(None, extract_face, image, self.detector, self.cropper)

        payload = await self.client.recognize(detection.cropped_image, model, threshold)
        result = self.to_result(payload)

        logger.info(
            f"[Recognition] model={model} threshold={threshold} -> "
            f"{result.recognized_name or 'unknown'} (confidence={result.confidence})"
        )
        return result

    @staticmethod
    def to_result(payload: Dict[str, Any]) -> RecognitionResult:
        name = payload.get("name")
        confidence = payload.get("confidence")
        matches = payload.get("matches")

        return RecognitionResult(
            recognized_name=name if isinstance(name, str) else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) and not isinstance(confidence, bool) else None,
            matches=matches if isinstance(matches, list) else [],
            details=payload,
        )
