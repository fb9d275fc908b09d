"""Tests for locally computed date/time answers."""
from datetime import datetime, timezone

import pytest

from core.clock import local_answer, now_in
from models.intent import IntentType

NOW = datetime(2024, 3, 5, 9, 4, tzinfo=timezone.utc)


@pytest.mark.parametrize("intent_type, expected", [
    (IntentType.GET_DATE, "Current date is 2024-03-05"),
    (IntentType.GET_TIME, "Current time is 09:04 AM"),
    (IntentType.GET_DAY, "Today is Tuesday"),
    (IntentType.GET_MONTH, "Current month is March"),
])
def test_clock_answers(intent_type, expected):
    assert local_answer(intent_type, NOW) == expected


def test_afternoon_uses_twelve_hour_clock():
    assert local_answer(IntentType.GET_TIME, NOW.replace(hour=21)) == "Current time is 09:04 PM"


@pytest.mark.parametrize("intent_type", [IntentType.GENERAL, IntentType.YOUTUBE_PLAY, IntentType.UNKNOWN])
def test_non_clock_intents_have_no_local_answer(intent_type):
    assert local_answer(intent_type, NOW) is None


def test_now_in_known_zone():
    assert now_in("Europe/Kyiv").tzinfo is not None
    assert str(now_in("Europe/Kyiv").tzinfo) == "Europe/Kyiv"


@pytest.mark.parametrize("name", [None, "", "Mars/Olympus_Mons"])
def test_now_in_falls_back_to_utc(name):
    assert now_in(name).utcoffset().total_seconds() == 0
