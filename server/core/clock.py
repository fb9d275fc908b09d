"""Locally computed answers for date/time intents."""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from models.intent import IntentType

logger = logging.getLogger(__name__)


def now_in(tz_name: Optional[str]) -> datetime:
    """Current time in ``tz_name``; unknown or empty names fall back to UTC."""
    if not tz_name:
        return datetime.now(timezone.utc)
    try:
        return datetime.now(ZoneInfo(tz_name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, falling back to UTC")
        return datetime.now(timezone.utc)


def local_answer(intent_type: IntentType, now: datetime) -> Optional[str]:
    """Spoken answer for a clock intent, or None for every other intent."""
    if intent_type is IntentType.GET_DATE:
        return f"Current date is {now:%Y-%m-%d}"
    if intent_type is IntentType.GET_TIME:
        return f"Current time is {now:%I:%M %p}"
    if intent_type is IntentType.GET_DAY:
        return f"Today is {now:%A}"
    if intent_type is IntentType.GET_MONTH:
        return f"Current month is {now:%B}"
    return None
