"""Maps a classified intent onto a client-side action (open a URL, speak text)."""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional
from urllib.parse import quote
import logging

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
FALLBACK_SPEECH = "I didn't understand the command. Please try rephrasing it."

GOOGLE_SEARCH_URL = "https://www.google.com/search?q={}"
YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query={}"
CALCULATOR_URL = "https://www.google.com/search?q=calculator"
INSTAGRAM_URL = "https://www.instagram.com"
FACEBOOK_URL = "https://www.facebook.com"
WEATHER_URL = "https://www.google.com/search?q=weather+{}"


@dataclass(frozen=True)
class Action:
    intent_type: str
    speech: str
    url: Optional[str] = None


def _q(term: str) -> str:
    return quote(term, safe="")


def clock_speech(intent_type: str, now: datetime) -> Optional[str]:
    if intent_type == "get_date":
        return f"Current date is {now:%Y-%m-%d}"
    if intent_type == "get_time":
        return f"Current time is {now:%I:%M %p}"
    if intent_type == "get_day":
        return f"Today is {now:%A}"
    if intent_type == "get_month":
        return f"Current month is {now:%B}"
    return None


class IntentDispatcher:
    """
    Fixed mapping from intent type to action.

    Clock intents are answered from the device clock, never from the
    classifier's text. Unrecognized types get a spoken fallback.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now().astimezone())
        self._url_builders: dict[str, Callable[[str], Optional[str]]] = {
            "google_search": lambda term: GOOGLE_SEARCH_URL.format(_q(term)) if term else None,
            "youtube_search": lambda term: YOUTUBE_SEARCH_URL.format(_q(term)) if term else None,
            "youtube_play": lambda term: YOUTUBE_SEARCH_URL.format(_q(term)) if term else None,
            "calculator_open": lambda term: CALCULATOR_URL,
            "instagram_open": lambda term: INSTAGRAM_URL,
            "facebook_open": lambda term: FACEBOOK_URL,
            "weather_show": lambda term: WEATHER_URL.format(_q(term or "current location")),
        }

    def dispatch(self, intent: Mapping) -> Action:
        intent_type = str(intent.get("type") or "").strip().lower()
        term = str(intent.get("userInput") or "").strip()
        response = str(intent.get("response") or "").strip()

        spoken_clock = clock_speech(intent_type, self.clock())
        if spoken_clock is not None:
            return Action(intent_type, spoken_clock)

        if intent_type in self._url_builders:
            url = self._url_builders[intent_type](term)
            return Action(intent_type, response, url)

        if intent_type == "general" and response:
            return Action(intent_type, response)

        logger.warning(f"Unhandled intent type {intent_type!r}; using spoken fallback")
        return Action(UNKNOWN, FALLBACK_SPEECH)
