"""
Custom exception hierarchy for the application.
All exceptions inherit from AppException for unified handling.

v2.0: Face pipeline errors (decode, no face, invalid model, remote service)
"""

from typing import Optional, Dict, Any, List


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        status_code: HTTP status code for API responses
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# === Not Found Errors ===

class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, entity: str, identifier: str = None):
        message = f"{entity} not found"
        if identifier:
            message = f"{entity} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class EmployeeNotFoundError(NotFoundError):
    def __init__(self, employee_id: str):
        super().__init__("Employee", employee_id)


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str = None,
        code: str = "VALIDATION_ERROR",
        status_code: int = 422,
    ):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details
        )

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


class DecodeError(ValidationError):
    """Uploaded bytes are not a decodable image."""

    def __init__(self, reason: str = "Invalid or corrupted image", field: str = "image"):
        super().__init__(message=reason, field=field, code="INVALID_IMAGE")


class NoFaceDetectedError(ValidationError):
    """Zero face candidates across all detector passes."""

    def __init__(self, message: str = None, angle: str = None):
        if message is None:
            message = "No face detected in the image. Please upload a clear photo with a visible face."
        super().__init__(message=message, field=angle, code="NO_FACE_DETECTED")
        self.angle = angle


class InvalidModelError(ValidationError):
    """Recognition model identifier is not one of the supported backends."""

    def __init__(self, model: str, allowed_values: List[str]):
        super().__init__(
            message=f"Invalid model '{model}'. Must be {' or '.join(repr(v) for v in allowed_values)}",
            field="model",
            code="INVALID_MODEL",
            status_code=400,
        )
        self.details["allowed_values"] = list(allowed_values)


# === Remote Service Errors ===

class RemoteServiceError(AppException):
    """The external recognition service call failed."""

    def __init__(self, message: str, api_status_code: int = 0, api_response: str = None):
        super().__init__(
            message=message,
            code="REMOTE_SERVICE_ERROR",
            status_code=502,
            details={
                "api_status_code": api_status_code,
                "api_response": api_response,
            }
        )

    @property
    def api_status_code(self) -> int:
        return self.details["api_status_code"]

    @property
    def api_response(self) -> Optional[str]:
        return self.details["api_response"]


# === Authentication Errors ===

class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401
        )


class InvalidTokenError(AuthenticationError):
    def __init__(self):
        super().__init__(message="Invalid or expired token")


class InsufficientPermissionsError(AppException):
    """User lacks required permissions."""

    def __init__(self, required_permission: str = None):
        message = "Insufficient permissions"
        details = {}
        if required_permission:
            message = f"Permission '{required_permission}' required"
            details["required"] = required_permission
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details=details
        )
