"""HTTP client for the assistant backend."""
from typing import Optional
import logging

import httpx

from voice_client.errors import AssistantRequestError

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout. Please try again."
SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment."
UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable."
UNREACHABLE_MESSAGE = "Unable to reach the assistant server."
DEFAULT_MESSAGE = "Something went wrong. Please try again."


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _status_error(response: httpx.Response) -> AssistantRequestError:
    status = response.status_code
    if status == 401:
        return AssistantRequestError(SESSION_EXPIRED_MESSAGE, status_code=status)
    if status == 408:
        return AssistantRequestError(
            _server_message(response) or TIMEOUT_MESSAGE, status_code=status, retryable=True
        )
    if status == 429:
        return AssistantRequestError(RATE_LIMITED_MESSAGE, status_code=status, retryable=True)
    if status >= 500:
        return AssistantRequestError(UNAVAILABLE_MESSAGE, status_code=status, retryable=True)
    return AssistantRequestError(_server_message(response) or DEFAULT_MESSAGE, status_code=status)


class AssistantApiClient:
    """Thin wrapper over the backend's /auth, /user and /assistant routes."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token or None
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TimeoutException:
            logger.warning(f"{method} {path} timed out")
            raise AssistantRequestError(TIMEOUT_MESSAGE, retryable=True)
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise AssistantRequestError(UNREACHABLE_MESSAGE, retryable=True)

        if response.is_success:
            try:
                return response.json()
            except ValueError:
                raise AssistantRequestError(DEFAULT_MESSAGE, status_code=response.status_code)

        logger.warning(f"{method} {path} returned {response.status_code}")
        raise _status_error(response)

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.access_token = data["access_token"]
        return data["user"]

    async def current_user(self) -> dict:
        data = await self._request("GET", "/user/current")
        return data["user"]

    async def ask(self, command: str, timezone: Optional[str] = None) -> dict:
        """Classify ``command``; returns {type, userInput, response, ...}."""
        payload = {"command": command}
        if timezone:
            payload["timezone"] = timezone
        return await self._request("POST", "/assistant/ask", json=payload)

    async def close(self) -> None:
        await self._client.aclose()
