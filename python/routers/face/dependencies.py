"""
Dependency injection for face endpoints.
Shared instances and setup functions.
"""

from typing import Dict, Optional

from fastapi import UploadFile

from core.exceptions import ValidationError
from models.domain.face import FaceAngle
from services.employees import InMemoryEmployeeDirectory
from services.face_pipeline import FacePipelineService
from utils.files import validate_upload

# Global instances (set by main.py on startup)
pipeline_instance: FacePipelineService = None
directory_instance: InMemoryEmployeeDirectory = None


def set_services(pipeline: FacePipelineService, directory: InMemoryEmployeeDirectory = None):
    """
    Set the service instances. Called from main.py during startup.
    """
    global pipeline_instance, directory_instance
    pipeline_instance = pipeline
    directory_instance = directory


def get_pipeline() -> FacePipelineService:
    """Dependency for FastAPI endpoints"""
    if pipeline_instance is None:
        raise RuntimeError("FacePipelineService not initialized. Check server startup logs.")
    return pipeline_instance


def get_employee_directory() -> InMemoryEmployeeDirectory:
    """Dependency for FastAPI endpoints"""
    if directory_instance is None:
        raise RuntimeError("Employee directory not initialized. Check server startup logs.")
    return directory_instance


async def read_angle_uploads(
    uploads: Dict[FaceAngle, Optional[UploadFile]],
    max_bytes: int,
) -> Dict[str, Optional[bytes]]:
    """
    Read the five angle parts. Absent or empty parts map to None/b"" so the
    angle-set check can report every missing angle at once.
    """
    images: Dict[str, Optional[bytes]] = {}
    for angle, upload in uploads.items():
        if upload is None:
            images[angle.value] = None
            continue
        validate_upload(upload, angle.value, max_bytes)
        data = await upload.read()
        if len(data) > max_bytes:
            raise ValidationError(f"File '{angle.value}' exceeds maximum size", field=angle.value)
        images[angle.value] = data
    return images
