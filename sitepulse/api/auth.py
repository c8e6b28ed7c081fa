# ==============================================================================
# Bearer Token Verification
# ==============================================================================
"""
Verifies the JWT bearer tokens that guard the analytics endpoints.

Tokens are issued elsewhere; this module only checks the signature and
expiry and extracts the caller identity (``userId`` or ``sub`` claim).
"""

import logging
from typing import Any

from fastapi import Depends, Request
from jose import JWTError, jwt

from sitepulse.api.deps import get_app_settings
from sitepulse.core.errors import SitePulseError
from sitepulse.utils.config import Settings

logger = logging.getLogger(__name__)


class AuthenticationError(SitePulseError):
    """Missing or invalid bearer token."""

    pass


def decode_access_token(token: str, secret_key: str, algorithm: str) -> dict[str, Any] | None:
    """
    Decode and verify a JWT.

    Returns:
        The token claims, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None


def require_caller(request: Request, settings: Settings = Depends(get_app_settings)) -> str:
    """
    FastAPI dependency returning the authenticated caller id.

    Raises:
        AuthenticationError: If the Authorization header is missing or invalid
    """
    header = request.headers.get("Authorization")
    if not header or not header.startswith("Bearer "):
        raise AuthenticationError("Unauthorized: No token provided")

    claims = decode_access_token(header[7:], settings.auth.secret_key, settings.auth.algorithm)
    caller = (claims or {}).get("userId") or (claims or {}).get("sub")
    if not caller:
        client = request.client.host if request.client else "-"
        logger.info("Rejected invalid bearer token from %s", client)
        raise AuthenticationError("Unauthorized: Invalid token")
    return str(caller)
