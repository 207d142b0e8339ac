"""
Unit tests for token handling and role guards
"""

import asyncio
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from models import UserRole
from utils.auth_dependencies import extract_token, require_role
from utils.error_handling import ForbiddenError, UnauthenticatedError
from utils.jwt_utils import Identity, JWTManager


@pytest.fixture
def manager():
    return JWTManager(secret="unit-secret", algorithm="HS256", expire_hours=1)


class TestJWTManager:
    def test_round_trip_identity(self, manager):
        token = manager.create_access_token(7, UserRole.TEACHER)

        assert manager.verify(token) == Identity(user_id=7, role=UserRole.TEACHER)

    def test_missing_token(self, manager):
        with pytest.raises(UnauthenticatedError):
            manager.verify(None)

    def test_wrong_secret(self, manager):
        token = JWTManager(secret="other-secret").create_access_token(7, UserRole.STUDENT)

        with pytest.raises(UnauthenticatedError):
            manager.verify(token)

    def test_expired_token(self, manager):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "7", "role": "student", "iat": past, "exp": past + timedelta(hours=1), "iss": manager.issuer},
            "unit-secret",
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError):
            manager.verify(token)

    def test_unknown_role_claim(self, manager):
        token = jwt.encode(
            {"sub": "7", "role": "janitor", "exp": datetime.now(timezone.utc) + timedelta(hours=1), "iss": manager.issuer},
            "unit-secret",
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError):
            manager.verify(token)


class TestRoleGuards:
    def test_extract_token_accepts_bare_and_bearer(self):
        assert extract_token("abc") == "abc"
        assert extract_token("Bearer abc") == "abc"
        assert extract_token(None) is None

    def test_guard_admits_listed_role(self):
        guard = require_role(UserRole.TEACHER, UserRole.ADMIN)
        identity = Identity(user_id=1, role=UserRole.ADMIN)

        assert asyncio.run(guard(identity=identity)) == identity

    def test_guard_rejects_other_roles(self):
        guard = require_role(UserRole.TEACHER)

        with pytest.raises(ForbiddenError):
            asyncio.run(guard(identity=Identity(user_id=1, role=UserRole.STUDENT)))
