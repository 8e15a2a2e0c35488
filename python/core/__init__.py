"""
Core package - foundation for the application.

Modules:
- config.py - Application settings via Pydantic Settings
- exceptions.py - Custom exception hierarchy
- responses.py - Unified API response format
- logging.py - Centralized logging configuration

Settings are imported from core.config directly (they depend on the
domain models, which in turn depend on core.exceptions).
"""

from core.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    RemoteServiceError,
    AuthenticationError,
)
from core.responses import ApiResponse

__all__ = [
    'AppException',
    'NotFoundError',
    'ValidationError',
    'RemoteServiceError',
    'AuthenticationError',
    'ApiResponse',
]
