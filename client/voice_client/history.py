"""Bounded in-memory conversation history for the live session."""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List

DEFAULT_MAX_TURNS = 10


@dataclass(frozen=True)
class ConversationTurn:
    user_text: str
    assistant_text: str
    intent_type: str
    timestamp: datetime = field(default_factory=datetime.now)


class ConversationHistory:
    """Ring buffer of the most recent turns; the oldest turn is evicted on overflow."""

    def __init__(self, maxlen: int = DEFAULT_MAX_TURNS):
        if maxlen < 1:
            raise ValueError("maxlen must be at least 1")
        self._turns: deque[ConversationTurn] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._turns.maxlen

    def add(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)

    def recent(self) -> List[ConversationTurn]:
        """Newest first."""
        return list(reversed(self._turns))

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self.recent())
