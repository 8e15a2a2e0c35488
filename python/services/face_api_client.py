"""
HTTP client for the external face recognition service.

The only network boundary of the pipeline. Every non-2xx answer, transport
failure or non-JSON body becomes RemoteServiceError, with one exception:
DELETE /database/{name} answering 404 is returned as an unsuccessful
result instead of raising.

Calls are never retried: registration is not idempotent on the remote side.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from core.exceptions import RemoteServiceError
from core.logging import get_logger
from models.domain.face import RecognitionModel

logger = get_logger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


class FaceApiClient:
    """
    Thin async wrapper over the recognition service endpoints.

    A new httpx.AsyncClient is opened per call; pass `transport` to route
    calls elsewhere (e.g. httpx.MockTransport in tests).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _send(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[FaceApi] {operation} failed: {type(e).__name__}: {e}")
            raise RemoteServiceError(f"Face API {operation} failed: {e}") from e

    @staticmethod
    def _parse(response: httpx.Response, operation: str) -> Dict[str, Any]:
        if not response.is_success:
            logger.error(f"[FaceApi] {operation} returned HTTP {response.status_code}: {response.text[:500]}")
            raise RemoteServiceError(
                f"Face API {operation} error: HTTP {response.status_code}",
                api_status_code=response.status_code,
                api_response=response.text,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"Face API {operation} returned a malformed response",
                api_status_code=response.status_code,
                api_response=response.text,
            ) from e
        if not isinstance(payload, dict):
            raise RemoteServiceError(
                f"Face API {operation} returned a malformed response",
                api_status_code=response.status_code,
                api_response=response.text,
            )
        return payload

    async def register(
        self,
        name: str,
        images: List[bytes],
        model: str,
        min_quality: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        POST /register with all crops in one multipart request.

        min_quality is only sent to the quality-aware backend.
        """
        params: Dict[str, Any] = {"model": model}
        if RecognitionModel.is_quality_aware(model) and min_quality is not None:
            params["min_quality"] = min_quality

        files = [
            ("files", (f"face_{i}.jpg", image, JPEG_CONTENT_TYPE))
            for i, image in enumerate(images)
        ]

        logger.info(f"[FaceApi] Registering '{name}' with {len(images)} image(s), model={model}")
        response = await self._send(
            "POST", "/register", "register",
            params=params, data={"name": name}, files=files,
        )
        return self._parse(response, "register")

    async def recognize(self, image: bytes, model: str, threshold: float) -> Dict[str, Any]:
        """POST /recognize with a single crop."""
        params = {"model": model, "threshold": threshold}
        files = {"file": ("face.jpg", image, JPEG_CONTENT_TYPE)}

        logger.info(f"[FaceApi] Recognizing face, model={model}, threshold={threshold}")
        response = await self._send("POST", "/recognize", "recognize", params=params, files=files)
        return self._parse(response, "recognize")

    async def database_info(self, model: str) -> Dict[str, Any]:
        """GET /database/info."""
        response = await self._send("GET", "/database/info", "database info", params={"model": model})
        return self._parse(response, "database info")

    async def save_database(self, path: Optional[str] = None) -> Dict[str, Any]:
        """POST /database/save, with a custom path when given."""
        params = {"path": path} if path and path.strip() else {}
        response = await self._send("POST", "/database/save", "database save", params=params)
        return self._parse(response, "database save")

    async def delete_person(self, name: str, model: str) -> Dict[str, Any]:
        """
        DELETE /database/{name}.

        Returns:
            Remote payload, or {"success": False, "message": ...} when the
            person does not exist (HTTP 404)
        """
        path = f"/database/{quote(name, safe='')}"
        response = await self._send("DELETE", path, "delete person", params={"model": model})

        if response.status_code == 404:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = f"Person '{name}' not found in database"
            if isinstance(body, dict) and isinstance(body.get("detail"), str):
                message = body["detail"]
            logger.info(f"[FaceApi] Delete '{name}': not found on remote")
            return {"success": False, "message": message}

        return self._parse(response, "delete person")
