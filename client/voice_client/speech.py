"""Speech adapter protocols and the mute-aware speaker."""
import asyncio
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Recognizer(Protocol):
    """Continuous speech recognizer (microphone side)."""

    @property
    def available(self) -> bool: ...

    @property
    def active(self) -> bool: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


class Synthesizer(Protocol):
    """Text-to-speech engine; ``speak`` completes when playback ends."""

    async def speak(self, text: str) -> None: ...

    def cancel(self) -> None: ...


class Speaker:
    """
    Wraps a Synthesizer with the session's mute semantics.

    While muted, ``say`` returns immediately without audio. ``cancel``
    interrupts the current utterance; an interrupted ``say`` returns False
    instead of raising, even if a newer utterance has already started.
    """

    def __init__(self, synthesizer: Synthesizer):
        self.synthesizer = synthesizer
        self.muted = False
        self._playback: Optional[asyncio.Future] = None
        # Playbacks we cancelled ourselves, until their ``say`` unwinds
        self._interrupted: set[asyncio.Future] = set()

    @property
    def speaking(self) -> bool:
        return self._playback is not None and not self._playback.done()

    async def say(self, text: str) -> bool:
        """Speak ``text``; True only if playback ran to completion."""
        if self.muted or not text or not text.strip():
            return False

        self.cancel()
        playback = asyncio.ensure_future(self.synthesizer.speak(text))
        self._playback = playback
        try:
            await playback
        except asyncio.CancelledError:
            if playback not in self._interrupted:
                raise
            return False
        except Exception as e:
            logger.error(f"Speech synthesis failed: {e}")
            return False
        finally:
            self._interrupted.discard(playback)
            if self._playback is playback:
                self._playback = None
        return True

    def cancel(self) -> None:
        """Stop the current utterance, if any."""
        playback = self._playback
        if playback is not None and not playback.done():
            self._interrupted.add(playback)
            playback.cancel()
        self.synthesizer.cancel()

    def set_muted(self, muted: bool) -> None:
        self.muted = muted
        if muted:
            self.cancel()
