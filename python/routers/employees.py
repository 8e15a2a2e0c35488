"""
Employee endpoints with face registration.
- POST   /            create employee + register 5 angle photos
- DELETE /{employee_id} remove face data, then the employee

The employee record is created only after all five photos pass face
detection. If the remote registration then fails, the employee is kept
and the error is returned (502).

Admin only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from core.config import Settings, get_settings
from core.exceptions import ValidationError
from core.logging import get_logger
from core.responses import ApiResponse
from models.domain.employee import Employee
from models.domain.face import FaceAngle
from models.domain.registration import RegistrationRequest
from services.auth import require_admin
from services.employees import InMemoryEmployeeDirectory
from services.face_pipeline import FacePipelineService
from routers.face.dependencies import get_employee_directory, get_pipeline, read_angle_uploads

logger = get_logger(__name__)
router = APIRouter()


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value.strip()


@router.post("", status_code=201)
async def create_employee_with_face(
    name: str = Form(None),
    department: str = Form(None),
    position: str = Form(None),
    front: Optional[UploadFile] = File(None),
    left: Optional[UploadFile] = File(None),
    right: Optional[UploadFile] = File(None),
    up: Optional[UploadFile] = File(None),
    down: Optional[UploadFile] = File(None),
    model: Optional[str] = Query(None),
    min_quality: Optional[int] = Query(None, alias="minQuality"),
    pipeline: FacePipelineService = Depends(get_pipeline),
    directory: InMemoryEmployeeDirectory = Depends(get_employee_directory),
    settings: Settings = Depends(get_settings),
    user: dict = Depends(require_admin),
):
    """Create an employee and register their face under the employee id."""
    name = _required_text(name, "name")
    department = _required_text(department, "department")
    position = _required_text(position, "position")

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

    created: dict = {}

    def commit() -> str:
        employee = directory.create(name, department=department, position=position)
        created["employee"] = employee
        return employee.id

    run = await pipeline.registration.execute(
        RegistrationRequest(person_name=name, model=model, min_quality=min_quality, images=images),
        commit=commit,
    )
    if run.error is not None:
        if run.committed:
            logger.warning(f"[Employees] {run.person_id} created but face registration failed: {run.error.message}")
        raise run.error

    employee: Employee = created["employee"]
    logger.info(f"[Employees] ✓ {employee.id} ({employee.name}) created with face registration")

    return ApiResponse.ok({
        "id": employee.id,
        "name": employee.name,
        "department": employee.department,
        "position": employee.position,
        "face_registration": run.outcome.model_dump(),
    }).model_dump()


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    model: Optional[str] = Query(None),
    pipeline: FacePipelineService = Depends(get_pipeline),
    directory: InMemoryEmployeeDirectory = Depends(get_employee_directory),
    user: dict = Depends(require_admin),
):
    """Delete face data on the remote service, then the employee record."""
    directory.get(employee_id)

    face_deletion = await pipeline.database.delete_person(employee_id, model)
    directory.delete(employee_id)

    return ApiResponse.ok({
        "id": employee_id,
        "deleted": True,
        "face_deletion": face_deletion,
    }).model_dump()
