"""Client-side error types."""


class SpeechCapabilityError(Exception):
    """The platform lacks a required speech API; reported once per session."""

    def __init__(self, message: str = "Speech Recognition API is not supported on this device."):
        super().__init__(message)
        self.user_message = message


class RecognitionTransientError(Exception):
    """Recoverable recognizer hiccup (no-speech, aborted, network)."""

    def __init__(self, code: str):
        super().__init__(f"Recognition error: {code}")
        self.code = code


class AssistantRequestError(Exception):
    """The backend could not classify a command."""

    def __init__(self, user_message: str, *, status_code: int | None = None, retryable: bool = False):
        super().__init__(user_message)
        self.user_message = user_message
        self.status_code = status_code
        self.retryable = retryable


# Recognizer error codes that mean "no microphone for this session"
PERMISSION_ERROR_CODES = frozenset({"not-allowed", "service-not-allowed", "audio-capture"})


def recognition_error(code: str) -> Exception:
    """Map a recognizer error code onto the session's error taxonomy."""
    if code in PERMISSION_ERROR_CODES:
        return SpeechCapabilityError(
            "Microphone access denied. Please allow microphone access and restart the assistant."
        )
    return RecognitionTransientError(code)
