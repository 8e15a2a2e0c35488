"""
Remote face database administration.
- GET    /database/info
- POST   /database/save
- DELETE /database/{name}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse
from services.auth import require_face_operator
from services.face_pipeline import FacePipelineService
from .dependencies import get_pipeline

router = APIRouter()


@router.get("/database/info")
async def database_info(
    model: Optional[str] = Query(None),
    pipeline: FacePipelineService = Depends(get_pipeline),
    user: dict = Depends(require_face_operator),
):
    """Person and face counts for one backend model."""
    return ApiResponse.ok(await pipeline.database.info(model)).model_dump()


@router.post("/database/save")
async def save_database(
    path: Optional[str] = Query(None),
    pipeline: FacePipelineService = Depends(get_pipeline),
    user: dict = Depends(require_face_operator),
):
    """Ask the remote service to persist its database (optionally to a custom path)."""
    return ApiResponse.ok(await pipeline.database.save(path)).model_dump()


@router.delete("/database/{name}")
async def delete_person(
    name: str,
    model: Optional[str] = Query(None),
    pipeline: FacePipelineService = Depends(get_pipeline),
    user: dict = Depends(require_face_operator),
):
    """Remove a person. An unknown name yields success=false, not an error."""
    return ApiResponse.ok(await pipeline.database.delete_person(name, model)).model_dump()
