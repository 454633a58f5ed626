"""Authentication utilities.

Credentials are issued elsewhere; this module decodes the bearer JWT into the
caller's identity and gates endpoints by role.

``create_access_token`` and ``create_user_token`` are helpers for tests and
local development only. No route calls them; production tokens come from the
external auth service signed with the same SECRET_KEY.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

from app.core import config
from app.core.constants import UserRole


class CurrentUser(BaseModel):
    """Authenticated identity carried in the access token."""
    id: int
    role: UserRole
    department: str


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)
    return encoded_jwt


def create_user_token(user_id: int, role: UserRole, department: str) -> str:
    """Create an access token for the given identity."""
    return create_access_token({"id": user_id, "role": UserRole(role).value, "department": department})


def _extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header:
        scheme, _, credentials = auth_header.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()

    # EventSource cannot send headers, so the stream endpoint accepts ?token=
    return request.query_params.get("token")


def get_current_user(request: Request) -> CurrentUser:
    """Verify the bearer token and return the caller's identity."""
    token = _extract_token(request)

    if not token:
        raise HTTPException(status_code=401, detail="Access token required")

    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
        return CurrentUser(**payload)
    except (jwt.PyJWTError, ValidationError, TypeError):
        raise HTTPException(status_code=403, detail="Invalid or expired token")


def require_roles(*roles: UserRole):
    """Build a dependency that only admits callers holding one of ``roles``."""
    allowed = set(roles)

    def dependency(request: Request) -> CurrentUser:
        user = get_current_user(request)
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency
