"""
Request logging middleware.
Logs every /api request and its response status with timing.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import get_logger, log_request, log_response

logger = get_logger("api")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Rules:
    - /api/health is not logged (polled by monitoring)
    - Non-/api/ paths (docs, static) are not logged
    """

    SKIP_PATHS = {"/api/health"}

    async def dispatch(self, request: Request, call_next):
        path = request.url.path.rstrip("/") or "/"

        if path in self.SKIP_PATHS or not path.startswith("/api"):
            return await call_next(request)

        started = time.perf_counter()
        log_request(logger, request.method, path)

        response = await call_next(request)

        log_response(logger, response.status_code, (time.perf_counter() - started) * 1000)
        return response
