"""Intent data models"""
from enum import Enum
from pydantic import BaseModel, field_validator


class IntentType(str, Enum):
    """Closed set of intents the classifier may return, plus ``unknown``."""
    GENERAL = "general"
    GOOGLE_SEARCH = "google_search"
    YOUTUBE_SEARCH = "youtube_search"
    YOUTUBE_PLAY = "youtube_play"
    GET_TIME = "get_time"
    GET_DATE = "get_date"
    GET_DAY = "get_day"
    GET_MONTH = "get_month"
    CALCULATOR_OPEN = "calculator_open"
    INSTAGRAM_OPEN = "instagram_open"
    FACEBOOK_OPEN = "facebook_open"
    WEATHER_SHOW = "weather_show"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "IntentType":
        """Map a raw classifier value onto the enum; anything else is UNKNOWN."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                candidate = cls(value.strip().lower())
            except ValueError:
                return cls.UNKNOWN
            return candidate
        return cls.UNKNOWN


LOCAL_CLOCK_INTENTS = frozenset({
    IntentType.GET_TIME,
    IntentType.GET_DATE,
    IntentType.GET_DAY,
    IntentType.GET_MONTH,
})

# Advertised to the model; UNKNOWN is ours, never the model's
CLASSIFIABLE_INTENTS = [t for t in IntentType if t is not IntentType.UNKNOWN]


class IntentRecord(BaseModel):
    """Contract between the classifier gateway and the dispatcher."""
    type: IntentType
    userInput: str
    response: str

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v):
        return IntentType.parse(v)

    @field_validator("userInput", "response")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v
