"""
Authentication service for FastAPI.

Bearer tokens are issued by the main backend; this service only verifies
them (python-jose, shared HS256 secret) and checks the `role` claim.

Claims: sub (user id), role (ADMIN | EVALUATOR), type ("access").
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from core.config import Settings, get_settings
from core.exceptions import AuthenticationError, InvalidTokenError, InsufficientPermissionsError
from core.logging import get_logger

logger = get_logger(__name__)

ROLE_ADMIN = "ADMIN"
ROLE_EVALUATOR = "EVALUATOR"

# auto_error=False: missing credentials are reported as AuthenticationError (ApiResponse format)
security_optional = HTTPBearer(auto_error=False)


def decode_access_token(token: str, settings: Settings) -> dict:
    """
    Verify a bearer token and return its claims.

    Raises:
        AuthenticationError: JWT secret not configured
        InvalidTokenError: bad signature, expired, wrong type or no subject
    """
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; rejecting authenticated request")
        raise AuthenticationError("Authentication is not configured")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise InvalidTokenError()

    if payload.get("type", "access") != "access" or not payload.get("sub"):
        raise InvalidTokenError()

    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Current caller as {"id", "role"}. With AUTH_ENABLED=false every caller is an admin."""
    if not settings.auth_enabled:
        return {"id": "anonymous", "role": ROLE_ADMIN}

    if credentials is None:
        raise AuthenticationError()

    payload = decode_access_token(credentials.credentials, settings)
    return {
        "id": str(payload["sub"]),
        "role": str(payload.get("role", "")).upper(),
    }


def require_roles(*roles: str) -> Callable:
    """Dependency factory: caller must hold one of the given roles."""
    allowed = {role.upper() for role in roles}

    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in allowed:
            logger.warning(f"User {user['id']} with role '{user['role']}' denied (needs {sorted(allowed)})")
            raise InsufficientPermissionsError(" or ".join(sorted(allowed)))
        return user

    return dependency


require_face_operator = require_roles(ROLE_ADMIN, ROLE_EVALUATOR)
require_admin = require_roles(ROLE_ADMIN)
