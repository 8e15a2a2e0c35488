"""
Registration orchestrator.

Five angle images -> detectability gate -> commit identity -> crop + submit
-> report. Every step is a transition on a RegistrationRun:

- VALIDATING: angle set intake, model normalization, detection on all five
  images. Any failure ends the run before the commit hook is called and
  before anything is sent to the remote service.
- COMMITTING: the caller's commit hook (e.g. create the employee record)
  runs exactly once and returns the person name to register under.
- SUBMITTING: crops built from the boxes found by the gate, sent in one
  register call. A failure here leaves run.committed=True; nothing is
  rolled back.
- DONE: the remote report, verbatim.

v1.0: Two-phase validate-then-commit registration
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import AppException, RemoteServiceError
from core.logging import get_logger
from models.domain.face import BoundingBox, FaceAngle, RecognitionModel, validate_angle_set
from models.domain.registration import (
    RegistrationOutcome,
    RegistrationPhase,
    RegistrationRequest,
    RegistrationRun,
)
from services.face_api_client import FaceApiClient
from services.face_cropper import FaceCropper
from services.face_detector import FaceDetector
from services.image_codec import decode_image

logger = get_logger(__name__)

# Returns the person name to register under; may be sync or async
CommitHook = Callable[[], Union[str, Awaitable[str]]]

DetectedAngles = Dict[FaceAngle, Tuple[np.ndarray, BoundingBox]]


class RegistrationOrchestrator:
    """Runs the registration state machine for one request at a time."""

    def __init__(
        self,
        detector: FaceDetector,
        cropper: FaceCropper,
        client: FaceApiClient,
        default_model: str = RecognitionModel.MAGFACE.value,
        default_min_quality: Optional[int] = 1,
    ):
        self.detector = detector
        self.cropper = cropper
        self.client = client
        self.default_model = default_model
        self.default_min_quality = default_min_quality

    # ------------------------------------------------------------------
    # Gate and crop (CPU-bound, run in the default executor)
    # ------------------------------------------------------------------

    def check_detectable(self, images: Dict[FaceAngle, bytes]) -> DetectedAngles:
        """
        Decode and detect every angle, in angle order.

        Raises:
            DecodeError / NoFaceDetectedError: naming the first failing angle
        """
        detected: DetectedAngles = {}
        for angle, data in images.items():
            raster = decode_image(data, field=angle.value)
            box = self.detector.detect_best_face(raster, angle=angle.value)
            detected[angle] = (raster, box)
            logger.debug(f"[Registration] {angle.value}: face {box.width}x{box.height} at ({box.x},{box.y})")
        return detected

    def crop_all(self, detected: DetectedAngles) -> List[bytes]:
        return [self.cropper.crop(raster, box) for raster, box in detected.values()]

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def validate(self, request: RegistrationRequest) -> Tuple[str, DetectedAngles]:
        """Intake + detectability gate. No side effects."""
        model = RecognitionModel.normalize(request.model, self.default_model)
        images = validate_angle_set(request.images)

        loop = asyncio.get_running_loop()
        detected = await loop.run_in_executor(None, self.check_detectable, images)
        return model, detected

    async def execute(
        self,
        request: RegistrationRequest,
        commit: Optional[CommitHook] = None,
    ) -> RegistrationRun:
        """
        Run the whole registration. Never raises AppException: failures are
        recorded on the returned run (run.error, run.failed_phase).
        """
        run = RegistrationRun(request.person_name)
        logger.info(f"[Registration] Start '{request.person_name}'")

        # VALIDATING
        try:
            run.model, detected = await self.validate(request)
        except AppException as e:
            logger.warning(f"[Registration] Validation failed for '{request.person_name}': {e.message}")
            run.fail(e)
            return run

        # COMMITTING
        run.advance(RegistrationPhase.COMMITTING)
        try:
            person_id = request.person_name
            if commit is not None:
                person_id = commit()
                if inspect.isawaitable(person_id):
                    person_id = await person_id
            run.mark_committed(str(person_id))
        except AppException as e:
            logger.error(f"[Registration] Commit failed for '{request.person_name}': {e.message}")
            run.fail(e)
            return run

        # SUBMITTING
        run.advance(RegistrationPhase.SUBMITTING)
        min_quality = request.min_quality if request.min_quality is not None else self.default_min_quality
        try:
            loop = asyncio.get_running_loop()
            crops = await loop.run_in_executor(None, self.crop_all, detected)
            payload = await self.client.register(run.person_id, crops, run.model, min_quality)
            outcome = self._to_outcome(payload)
        except AppException as e:
            logger.error(
                f"[Registration] Submit failed for '{run.person_id}' after commit "
                f"(identity kept, no rollback): {e.message}"
            )
            run.fail(e)
            return run

        # DONE
        run.complete(outcome)
        logger.info(
            f"[Registration] ✓ '{run.person_id}' registered: "
            f"{outcome.total_registered} ok, {outcome.failed_count} failed (model={run.model})"
        )
        return run

    async def register(
        self,
        request: RegistrationRequest,
        commit: Optional[CommitHook] = None,
    ) -> RegistrationOutcome:
        """Like execute(), but raises the run's error on failure."""
        run = await self.execute(request, commit)
        if run.error is not None:
            raise run.error
        return run.outcome

    @staticmethod
    def _to_outcome(payload: Dict[str, Any]) -> RegistrationOutcome:
        try:
            return RegistrationOutcome.model_validate(payload)
        except PydanticValidationError as e:
            raise RemoteServiceError(
                "Face API register returned a malformed response",
                api_status_code=200,
                api_response=str(payload),
            ) from e
