"""
Administrative passthroughs to the remote face database.
"""

from typing import Any, Dict, Optional

from core.logging import get_logger
from models.domain.face import RecognitionModel
from services.face_api_client import FaceApiClient

logger = get_logger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


class FaceDatabaseService:

    def __init__(self, client: FaceApiClient, default_model: str = RecognitionModel.MAGFACE.value):
        self.client = client
        self.default_model = default_model

    async def info(self, model: Optional[str] = None) -> Dict[str, Any]:
        model = RecognitionModel.normalize(model, self.default_model)
        payload = await self.client.database_info(model)
        return {
            "model": model,
            "total_persons": _as_int(payload.get("total_persons")),
            "total_faces": _as_int(payload.get("total_faces")),
            "details": payload,
        }

    async def save(self, path: Optional[str] = None) -> Dict[str, Any]:
        payload = await self.client.save_database(path)
        logger.info(f"[FaceDatabase] Save requested (path={path or 'default'}): {payload.get('message')}")
        return {
            "success": bool(payload.get("success", False)),
            "message": payload.get("message"),
        }

    async def delete_person(self, name: str, model: Optional[str] = None) -> Dict[str, Any]:
        """Remove a person from the remote database. Unknown names are not an error."""
        model = RecognitionModel.normalize(model, self.default_model)
        payload = await self.client.delete_person(name, model)
        success = bool(payload.get("success", False))
        if success:
            logger.info(f"[FaceDatabase] ✓ Deleted '{name}' (model={model})")
        else:
            logger.info(f"[FaceDatabase] Delete '{name}' had no effect: {payload.get('message')}")
        return {
            "success": success,
            "name": name,
            "model": model,
            "message": payload.get("message"),
        }
