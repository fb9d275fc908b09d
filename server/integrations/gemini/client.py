"""Gemini client: generative language API wrapper with robust JSON extraction."""
import httpx
import json
import re
from typing import Optional
from config.settings import settings
from core.errors import ClassificationError, ClassificationFailure
import logging

logger = logging.getLogger(__name__)

# Pre-compiled regex for stripping markdown fences from LLM output
_MD_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def _is_json_object(candidate: str) -> bool:
    try:
        return isinstance(json.loads(candidate), dict)
    except json.JSONDecodeError:
        return False


def _scan_object(text: str, start: int) -> Optional[int]:
    """Return the index of the brace closing the object opened at ``start``.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_json_object(text: str) -> str:
    """
    Robustly extract a JSON object from LLM output.

    Handles:
    - Markdown code fences (```json ... ```)
    - Leading/trailing prose around the JSON
    - Stray braces in the prose (skipped)
    - Multiple JSON objects (takes the first complete one)

    Raises ValueError if no valid JSON object is found.
    """
    # 1. Try extracting from markdown fences first
    fence_match = _MD_FENCE_RE.search(text)
    if fence_match:
        candidate = fence_match.group(1).strip()
        if _is_json_object(candidate):
            return candidate

    # 2. Brace-matching with depth tracking from each opening brace in turn
    start = text.find("{")
    while start != -1:
        end = _scan_object(text, start)
        if end is not None:
            candidate = text[start : end + 1]
            if _is_json_object(candidate):
                return candidate
        start = text.find("{", start + 1)

    raise ValueError("No valid JSON object found in LLM response")


class GeminiClient:
    """Wrapper for the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.GEMINI_API_URL
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.timeout_s = timeout_s or settings.GEMINI_TIMEOUT

        self.client = httpx.AsyncClient(
            timeout=self.timeout_s,
            headers={
                "Content-Type": "application/json",
                "User-Agent": "VirtualAssistant/1.0",
            },
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def _build_payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.GEMINI_TEMPERATURE,
                "topK": settings.GEMINI_TOP_K,
                "topP": settings.GEMINI_TOP_P,
                "maxOutputTokens": settings.GEMINI_MAX_OUTPUT_TOKENS,
            },
            "safetySettings": [
                {"category": category, "threshold": settings.GEMINI_SAFETY_THRESHOLD}
                for category in _HARM_CATEGORIES
            ],
        }

    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the first candidate's text."""
        if not self.is_configured:
            raise ClassificationError(
                ClassificationFailure.MISCONFIGURED,
                "Gemini API configuration is missing",
            )

        try:
            response = await self.client.post(
                self.api_url,
                params={"key": self.api_key},
                json=self._build_payload(prompt),
            )
            response.raise_for_status()
            result = response.json()
        except httpx.TimeoutException:
            logger.error(f"Gemini request timed out after {self.timeout_s}s")
            raise ClassificationError(
                ClassificationFailure.TIMEOUT,
                f"Gemini request timed out after {self.timeout_s}s",
            )
        except httpx.HTTPStatusError as e:
            raise _status_error(e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini transport error: {e}")
            raise ClassificationError(ClassificationFailure.UPSTREAM_ERROR, str(e)) from e

        try:
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None

        if not isinstance(text, str) or not text.strip():
            logger.error("No response generated from Gemini API")
            raise ClassificationError(
                ClassificationFailure.MALFORMED_RESPONSE,
                "No response generated from Gemini API",
            )
        return text

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


def _status_error(status_code: int) -> ClassificationError:
    if status_code == 401:
        cause = ClassificationFailure.AUTH_FAILURE
    elif status_code == 429:
        cause = ClassificationFailure.RATE_LIMITED
    elif status_code >= 500:
        cause = ClassificationFailure.UPSTREAM_UNAVAILABLE
    else:
        cause = ClassificationFailure.UPSTREAM_ERROR
    logger.error(f"Gemini API returned HTTP {status_code} ({cause.value})")
    return ClassificationError(cause, f"Gemini API returned HTTP {status_code}")
