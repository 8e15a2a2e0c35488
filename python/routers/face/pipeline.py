"""
Face pipeline endpoints.
- POST /register   5 angle images -> remote registration
- POST /recognize  single probe image -> remote identification
- POST /detect     diagnostic: best face box, optional crop

All endpoints require an ADMIN or EVALUATOR token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from core.config import Settings, get_settings
from core.exceptions import ValidationError
from core.logging import get_logger
from core.responses import ApiResponse
from models.domain.face import FaceAngle
from models.domain.registration import RegistrationRequest
from services.auth import require_face_operator
from services.face_pipeline import FacePipelineService
from utils.files import read_upload
from .dependencies import get_pipeline, read_angle_uploads

logger = get_logger(__name__)
router = APIRouter()


@router.post("/register", status_code=201)
async def register_face(
    name: str = Form(...),
    front: Optional[UploadFile] = File(None),
    left: Optional[UploadFile] = File(None),
    right: Optional[UploadFile] = File(None),
    up: Optional[UploadFile] = File(None),
    down: Optional[UploadFile] = File(None),
    model: Optional[str] = Query(None),
    min_quality: Optional[int] = Query(None, alias="minQuality"),
    pipeline: FacePipelineService = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
    user: dict = Depends(require_face_operator),
):
    """
    Register a person with one photo per angle (front, left, right, up, down).

    Nothing is sent to the remote service unless a face is found in all five.
    """
    if not name.strip():
        raise ValidationError("Name is required", field="name")

    images = await read_angle_uploads(
        {
            FaceAngle.FRONT: front,
            FaceAngle.LEFT: left,
            FaceAngle.RIGHT: right,
            FaceAngle.UP: up,
            FaceAngle.DOWN: down,
        },
        settings.max_upload_bytes,
    )
    logger.info(f"[FaceAPI] Register '{name}' requested by {user['id']}")

    outcome = await pipeline.registration.register(
        RegistrationRequest(
            person_name=name.strip(),
            model=model,
            min_quality=min_quality,
            images=images,
        )
    )
    return ApiResponse.ok(outcome.model_dump()).model_dump()


@router.post("/recognize")
async def recognize_face(
    file: Optional[UploadFile] = File(None),
    model: Optional[str] = Query(None),
    threshold: Optional[float] = Query(None),
    pipeline: FacePipelineService = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
    user: dict = Depends(require_face_operator),
):
    """Identify the best face in the uploaded image."""
    image = await read_upload(file, "file", settings.max_upload_bytes)

    result = await pipeline.recognition.recognize(image, model=model, threshold=threshold)
    return ApiResponse.ok(result.model_dump()).model_dump()


@router.post("/detect")
async def detect_face(
    file: Optional[UploadFile] = File(None),
    include_crop: bool = Query(False, alias="includeCrop"),
    pipeline: FacePipelineService = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
    user: dict = Depends(require_face_operator),
):
    """
    Diagnostic detection.

    With includeCrop=true the Base64 JPEG crop is returned and also saved
    under CROP_OUTPUT_DIR for inspection.
    """
    image = await read_upload(file, "file", settings.max_upload_bytes)

    result = await pipeline.detect(image, filename=file.filename, include_crop=include_crop)
    return ApiResponse.ok(result).model_dump()
