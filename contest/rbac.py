"""
contest/rbac.py
Admin access control

Tokens are issued by the auth service; this module only verifies them.
An admin token is an HS256 JWT access token with `role` == "ADMIN".
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from contest.config.settings import settings
from contest.errors import ErrorCode, ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "ADMIN"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    subject: str
    role: str


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AdminPrincipal:
    """
    Resolve the admin behind the bearer token.
    401 when the token is missing or invalid, 403 when it is not an admin.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type", "access") != "access" or not payload.get("sub"):
        raise UnauthorizedError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

    role = str(payload.get("role", "")).upper()
    if role != ADMIN_ROLE:
        logger.warning(f"Non-admin token rejected for subject {payload.get('sub')}")
        raise ForbiddenError()

    return AdminPrincipal(subject=str(payload["sub"]), role=role)
