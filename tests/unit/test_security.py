"""Unit tests for security functions."""
from datetime import timedelta
from unittest.mock import Mock

import jwt
import pytest
from fastapi import HTTPException

from app.core.config import settings
from app.core.constants import UserRole
from app.core.security import (
    CurrentUser,
    create_access_token,
    create_user_token,
    get_current_user,
    require_roles,
)


def _request(headers=None, query_params=None):
    request = Mock()
    request.headers = headers or {}
    request.query_params = query_params or {}
    return request


def _bearer(token):
    return _request(headers={"Authorization": f"Bearer {token}"})


@pytest.mark.unit
class TestJWT:
    """Test JWT token creation."""

    def test_create_access_token(self):
        """Should create valid JWT token."""
        token = create_access_token({"id": 1})
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

        assert payload["id"] == 1
        assert "exp" in payload

    def test_create_user_token_claims(self):
        token = create_user_token(3, UserRole.FACULTY, "Physics")
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

        assert payload["id"] == 3
        assert payload["role"] == "FACULTY"
        assert payload["department"] == "Physics"

    def test_access_token_not_valid_as_checkin_token(self):
        """QR tokens are signed with a separate key."""
        from app.core.qr_token import verify_checkin_token

        token = create_access_token({"event_id": 1, "issued_at": 1})
        assert verify_checkin_token(token) is None


@pytest.mark.unit
class TestGetCurrentUser:

    def test_bearer_header(self):
        user = get_current_user(_bearer(create_user_token(3, UserRole.STUDENT, "Physics")))

        assert user == CurrentUser(id=3, role=UserRole.STUDENT, department="Physics")

    def test_query_token_fallback(self):
        token = create_user_token(3, UserRole.FACULTY, "Physics")

        user = get_current_user(_request(query_params={"token": token}))

        assert user.role is UserRole.FACULTY

    def test_missing_token(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_request())

        assert exc_info.value.status_code == 401

    def test_invalid_token(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_bearer("not-a-token"))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Invalid or expired token"

    def test_expired_token(self):
        token = create_access_token(
            {"id": 3, "role": "STUDENT", "department": "Physics"},
            expires_delta=timedelta(minutes=-1),
        )

        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_bearer(token))

        assert exc_info.value.status_code == 403

    def test_token_missing_claims(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_bearer(create_access_token({"id": 3})))

        assert exc_info.value.status_code == 403

    def test_unknown_role(self):
        token = create_access_token({"id": 3, "role": "JANITOR", "department": "Physics"})

        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_bearer(token))

        assert exc_info.value.status_code == 403


@pytest.mark.unit
class TestRequireRoles:

    def test_allowed_role(self):
        dependency = require_roles(UserRole.FACULTY, UserRole.ADMIN)

        user = dependency(_bearer(create_user_token(1, UserRole.ADMIN, "Physics")))

        assert user.id == 1

    def test_disallowed_role(self):
        dependency = require_roles(UserRole.FACULTY, UserRole.ADMIN)

        with pytest.raises(HTTPException) as exc_info:
            dependency(_bearer(create_user_token(1, UserRole.STUDENT, "Physics")))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Insufficient permissions"
