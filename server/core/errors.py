"""Typed errors shared by the classifier gateway, services and HTTP layer."""
from enum import Enum


class AssistantError(Exception):
    """Base error carrying an HTTP status and a short user-facing message."""

    status_code: int = 500
    default_message: str = "Failed to process your request. Please try again."

    def __init__(
        self,
        message: str = "",
        *,
        user_message: str | None = None,
        retryable: bool = False,
    ):
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message
        self.retryable = retryable


class ConfigurationError(AssistantError):
    """Missing or invalid credentials. Fatal at startup, never retried."""

    status_code = 503
    default_message = "AI service is not properly configured. Please contact support."


class MailDeliveryError(AssistantError):
    """The SMTP server refused or could not be reached."""

    status_code = 503
    default_message = "Could not send the email. Please try again later."


class ValidationError(AssistantError):
    """Bad caller input."""

    status_code = 400
    default_message = "Command is required and must be a non-empty string"

    def __init__(self, message: str = ""):
        super().__init__(message, user_message=message or None)


class ClassificationFailure(str, Enum):
    TIMEOUT = "timeout"
    AUTH_FAILURE = "auth_failure"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"
    MISCONFIGURED = "misconfigured"


# cause -> (status code, user message, retryable)
_FAILURE_POLICY: dict[ClassificationFailure, tuple[int, str, bool]] = {
    ClassificationFailure.TIMEOUT: (
        408, "Request timed out. Please try again.", True,
    ),
    ClassificationFailure.RATE_LIMITED: (
        429, "Too many requests. Please wait a moment and try again.", True,
    ),
    ClassificationFailure.UPSTREAM_UNAVAILABLE: (
        503, "AI service is temporarily unavailable. Please try again later.", True,
    ),
    ClassificationFailure.AUTH_FAILURE: (
        503, "AI service is not properly configured. Please contact support.", False,
    ),
    ClassificationFailure.MISCONFIGURED: (
        503, "AI service is not properly configured. Please contact support.", False,
    ),
    ClassificationFailure.UPSTREAM_ERROR: (
        500, "Failed to process your request. Please try again.", False,
    ),
    ClassificationFailure.MALFORMED_RESPONSE: (
        500, "Sorry, I couldn't understand the response. Please try again.", False,
    ),
}


class ClassificationError(AssistantError):
    """Intent classification failed; ``cause`` tells the HTTP layer why."""

    def __init__(self, cause: ClassificationFailure, message: str = ""):
        status_code, user_message, retryable = _FAILURE_POLICY[cause]
        super().__init__(
            message or cause.value,
            user_message=user_message,
            retryable=retryable,
        )
        self.cause = cause
        self.status_code = status_code
