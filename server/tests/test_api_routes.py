"""HTTP-level tests for the assistant, user, auth and health routes."""
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.middleware.auth_middleware import get_current_user
from config.settings import settings
from core.dependencies import (
    get_assistant_service,
    get_auth_service,
    get_avatar_service,
    get_password_reset_service,
    get_user_repo,
)
from core.errors import ClassificationError, ClassificationFailure
from services.avatar_service import AvatarService

USER = {
    "id": str(uuid4()),
    "name": "Ada",
    "email": "ada@example.com",
    "assistant_name": "Jarvis",
    "assistant_image": None,
    "is_active": True,
}


@pytest.fixture
def assistant_service():
    service = MagicMock()
    service.ask = AsyncMock(return_value={
        "success": True,
        "type": "youtube_play",
        "userInput": "cats",
        "response": "Playing cats",
        "timestamp": "2024-03-05T09:00:00+00:00",
    })
    service.history = AsyncMock(return_value=[])
    return service


@pytest.fixture
def app(assistant_service):
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: USER
    app.dependency_overrides[get_assistant_service] = lambda: assistant_service
    return app


@pytest.fixture
def client(app):
    # No context manager: the lifespan (Supabase, Gemini) is not started
    return TestClient(app)


# ---------------------------------------------------------------------------
# /assistant
# ---------------------------------------------------------------------------

class TestAsk:
    def test_success_shape(self, client, assistant_service):
        response = client.post("/assistant/ask", json={"command": "Jarvis play cats"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["type"] == "youtube_play"
        assert body["userInput"] == "cats"
        assert body["response"] == "Playing cats"
        assistant_service.ask.assert_awaited_once_with(USER, "Jarvis play cats", timezone_name=None)

    @pytest.mark.parametrize("cause, status, message", [
        (ClassificationFailure.TIMEOUT, 408, "Request timed out. Please try again."),
        (ClassificationFailure.RATE_LIMITED, 429, "Too many requests. Please wait a moment and try again."),
        (ClassificationFailure.UPSTREAM_UNAVAILABLE, 503, "AI service is temporarily unavailable. Please try again later."),
        (ClassificationFailure.AUTH_FAILURE, 503, "AI service is not properly configured. Please contact support."),
        (ClassificationFailure.MALFORMED_RESPONSE, 500, "Sorry, I couldn't understand the response. Please try again."),
    ])
    def test_classification_failures(self, client, assistant_service, cause, status, message):
        assistant_service.ask.side_effect = ClassificationError(cause)

        response = client.post("/assistant/ask", json={"command": "hello"})

        assert response.status_code == status
        body = response.json()
        assert body["success"] is False
        assert body["message"] == message

    @pytest.mark.parametrize("payload", [{}, {"command": ""}, {"command": "   "}, {"command": "x" * 1001}])
    def test_invalid_command_is_400(self, client, assistant_service, payload):
        response = client.post("/assistant/ask", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert body["errors"]
        assistant_service.ask.assert_not_awaited()

    def test_ai_rate_limit(self, client):
        statuses = [
            client.post("/assistant/ask", json={"command": f"hello {i}"}).status_code
            for i in range(11)
        ]
        assert statuses[:10] == [200] * 10
        assert statuses[10] == 429

    def test_history(self, client, assistant_service):
        assistant_service.history.return_value = [
            {"command": "hi", "response": "Hello", "intent_type": "general", "created_at": "2024-03-05T09:00:00+00:00"},
        ]

        response = client.get("/assistant/history?limit=5")

        assert response.status_code == 200
        assert response.json()["history"][0]["command"] == "hi"
        assistant_service.history.assert_awaited_once_with(USER, 5)


# ---------------------------------------------------------------------------
# /user
# ---------------------------------------------------------------------------

class TestUser:
    def test_current_user(self, client):
        response = client.get("/user/current")
        assert response.status_code == 200
        assert response.json()["user"]["assistant_name"] == "Jarvis"

    def test_update_assistant_with_image_url(self, app, client):
        repo = MagicMock()
        repo.update_assistant = AsyncMock(return_value={
            **USER, "assistant_name": "Friday", "assistant_image": "https://img.test/a.png",
        })
        app.dependency_overrides[get_user_repo] = lambda: repo
        app.dependency_overrides[get_avatar_service] = lambda: MagicMock()

        response = client.post(
            "/user/assistant",
            data={"assistant_name": "Friday", "image_url": "https://img.test/a.png"},
        )

        assert response.status_code == 200
        assert response.json()["user"]["assistant_name"] == "Friday"
        args = repo.update_assistant.call_args.args
        assert args[1:] == ("Friday", "https://img.test/a.png")

    def test_update_assistant_without_image_is_400(self, app, client):
        app.dependency_overrides[get_user_repo] = lambda: MagicMock()
        app.dependency_overrides[get_avatar_service] = lambda: MagicMock()

        response = client.post("/user/assistant", data={"assistant_name": "Friday"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_oversized_upload_is_rejected_after_bounded_read(self, app, client, monkeypatch):
        monkeypatch.setattr(settings, "AVATAR_MAX_BYTES", 10)
        storage_client = MagicMock()
        avatar_service = AvatarService(storage_client, bucket="avatars")
        avatar_service.upload = AsyncMock(wraps=avatar_service.upload)
        repo = MagicMock()
        repo.update_assistant = AsyncMock()
        app.dependency_overrides[get_user_repo] = lambda: repo
        app.dependency_overrides[get_avatar_service] = lambda: avatar_service

        response = client.post(
            "/user/assistant",
            data={"assistant_name": "Friday"},
            files={"assistant_image": ("big.png", b"x" * 50, "image/png")},
        )

        assert response.status_code == 400
        assert "too large" in response.json()["message"]
        content = avatar_service.upload.call_args.args[1]
        assert len(content) == 11
        storage_client.storage.from_.return_value.upload.assert_not_called()
        repo.update_assistant.assert_not_awaited()

    def test_unauthenticated_request_is_401(self):
        app = create_app()
        app.dependency_overrides[get_user_repo] = lambda: MagicMock()
        response = TestClient(app).get("/user/current")
        assert response.status_code == 401
        assert response.json()["success"] is False


# ---------------------------------------------------------------------------
# /auth
# ---------------------------------------------------------------------------

class TestAuthRoutes:
    def test_login_sets_cookie(self, app, client):
        auth = MagicMock()
        auth.login_user = AsyncMock(return_value=(USER, "access-tok", "refresh-tok"))
        app.dependency_overrides[get_auth_service] = lambda: auth

        response = client.post("/auth/login", json={"email": "ada@example.com", "password": "Secret123"})

        assert response.status_code == 200
        assert response.json()["access_token"] == "access-tok"
        assert response.cookies.get("token") == "access-tok"

    def test_bad_credentials_are_401(self, app, client):
        auth = MagicMock()
        auth.login_user = AsyncMock(side_effect=ValueError("Invalid email or password"))
        app.dependency_overrides[get_auth_service] = lambda: auth

        response = client.post("/auth/login", json={"email": "ada@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid email or password"}

    def test_duplicate_registration_is_409(self, app, client):
        auth = MagicMock()
        auth.register_user = AsyncMock(side_effect=ValueError("Email already exists."))
        app.dependency_overrides[get_auth_service] = lambda: auth

        response = client.post("/auth/register", json={
            "name": "Ada Lovelace", "email": "ada@example.com", "password": "Secret123",
        })

        assert response.status_code == 409


class TestForgotPasswordRoutes:
    @pytest.fixture
    def reset_service(self, app):
        service = MagicMock()
        service.send_code = AsyncMock()
        service.reset_password = AsyncMock()
        app.dependency_overrides[get_password_reset_service] = lambda: service
        return service

    def test_send_otp(self, client, reset_service):
        response = client.post("/auth/forgot-password/send-otp", json={"email": "ada@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent to your email."}
        reset_service.send_code.assert_awaited_once_with("ada@example.com")

    def test_send_otp_unknown_user_is_404(self, client, reset_service):
        reset_service.send_code.side_effect = LookupError("User not found.")

        response = client.post("/auth/forgot-password/send-otp", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found."

    def test_verify_otp_resets_password(self, client, reset_service):
        response = client.post("/auth/forgot-password/verify-otp", json={
            "email": "ada@example.com", "otp": "123456", "newPassword": "NewSecret1",
        })

        assert response.status_code == 200
        assert response.json()["message"] == "Password reset successful."
        reset_service.reset_password.assert_awaited_once_with("ada@example.com", "123456", "NewSecret1")

    def test_wrong_otp_is_400(self, client, reset_service):
        reset_service.reset_password.side_effect = ValueError("Invalid OTP.")

        response = client.post("/auth/forgot-password/verify-otp", json={
            "email": "ada@example.com", "otp": "654321", "newPassword": "NewSecret1",
        })

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid OTP."}

    @pytest.mark.parametrize("payload", [
        {"email": "ada@example.com", "otp": "12ab56", "newPassword": "NewSecret1"},
        {"email": "ada@example.com", "otp": "123456", "newPassword": "weak"},
        {"email": "ada@example.com", "otp": "123456"},
    ])
    def test_malformed_reset_request_is_400(self, client, reset_service, payload):
        response = client.post("/auth/forgot-password/verify-otp", json=payload)

        assert response.status_code == 400
        reset_service.reset_password.assert_not_awaited()


def test_health_reports_classifier_state(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "classifier_ready" in response.json()
