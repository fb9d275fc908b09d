"""Tests for access/refresh token helpers."""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

import jwt
import pytest

from utils.jwt_utils import decode_access_token, generate_access_token, generate_refresh_token

SECRET = "unit-test-secret"
ALGORITHM = "HS256"
SEVEN_DAYS_MINUTES = 7 * 24 * 60


@pytest.fixture(autouse=True)
def jwt_settings():
    with patch("utils.jwt_utils.settings") as mock:
        mock.JWT_SECRET_KEY = SECRET
        mock.JWT_ALGORITHM = ALGORITHM
        mock.ACCESS_TOKEN_EXPIRE_MINUTES = SEVEN_DAYS_MINUTES
        yield mock


def _encode(**overrides):
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": str(uuid4()),
        "iat": now,
        "exp": now + timedelta(hours=1),
        "type": "access",
    }
    payload.update(overrides)
    return jwt.encode(payload, SECRET, algorithm=ALGORITHM)


class TestAccessToken:
    def test_round_trip_carries_user_id(self):
        uid = uuid4()
        payload = decode_access_token(generate_access_token(uid))
        assert payload["user_id"] == str(uid)
        assert payload["type"] == "access"

    def test_session_lifetime_is_seven_days(self):
        payload = decode_access_token(generate_access_token(uuid4()))
        assert payload["exp"] - payload["iat"] == SEVEN_DAYS_MINUTES * 60

    def test_garbage_is_rejected(self):
        assert decode_access_token("not-a-jwt") is None

    def test_other_secret_is_rejected(self, jwt_settings):
        token = generate_access_token(uuid4())
        jwt_settings.JWT_SECRET_KEY = "another-secret"
        assert decode_access_token(token) is None

    def test_expired_token_is_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = _encode(iat=past, exp=past + timedelta(hours=1))
        assert decode_access_token(token) is None

    def test_refresh_typed_jwt_is_rejected(self):
        assert decode_access_token(_encode(type="refresh")) is None


class TestRefreshToken:
    def test_tokens_are_unique_and_long(self):
        tokens = {generate_refresh_token() for _ in range(50)}
        assert len(tokens) == 50
        assert all(len(token) >= 32 for token in tokens)
