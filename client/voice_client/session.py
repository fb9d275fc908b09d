"""
Conversational session state machine.

One session owns the recognizer, the speaker and the conversation history.
The state is always exactly one SessionState; every change goes through
``_transition`` so that the recognizer is stopped before PROCESSING or
SPEAKING and only re-armed in LISTENING.
"""
import asyncio
import logging
import webbrowser
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional

from voice_client.dispatch import Action, IntentDispatcher
from voice_client.errors import (
    AssistantRequestError,
    SpeechCapabilityError,
    recognition_error,
)
from voice_client.history import ConversationHistory, ConversationTurn
from voice_client.speech import Recognizer, Speaker

logger = logging.getLogger(__name__)

GENERIC_APOLOGY = "Sorry, something went wrong. Please try again."


class SessionState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"


_TRANSITIONS = {
    SessionState.IDLE: {SessionState.LISTENING, SessionState.PROCESSING},
    SessionState.LISTENING: {SessionState.PROCESSING, SessionState.IDLE},
    SessionState.PROCESSING: {SessionState.SPEAKING, SessionState.LISTENING, SessionState.IDLE},
    SessionState.SPEAKING: {SessionState.LISTENING, SessionState.IDLE},
}


class IllegalTransition(RuntimeError):
    def __init__(self, current: SessionState, target: SessionState):
        super().__init__(f"Illegal session transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


def _log_error(error: Exception) -> None:
    logger.error(f"Assistant error: {getattr(error, 'user_message', error)}")


class AssistantSession:
    """
    Drives listen → classify → act → speak → listen.

    ``classify`` is an async callable returning the intent mapping
    ({type, userInput, response}); it raises AssistantRequestError on
    failure. Results that arrive after ``stop_assistant`` or ``close`` are
    discarded via an epoch counter.
    """

    def __init__(
        self,
        recognizer: Recognizer,
        speaker: Speaker,
        classify: Callable[[str], Awaitable[Mapping]],
        dispatcher: Optional[IntentDispatcher] = None,
        assistant_name: str = "Assistant",
        opener: Optional[Callable[[str], object]] = None,
        history: Optional[ConversationHistory] = None,
        restart_delay: float = 0.5,
        error_restart_delay: float = 1.0,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.recognizer = recognizer
        self.speaker = speaker
        self.classify = classify
        self.dispatcher = dispatcher or IntentDispatcher()
        self.assistant_name = assistant_name
        self.opener = opener or webbrowser.open_new_tab
        self.history = history or ConversationHistory()
        self.restart_delay = restart_delay
        self.error_restart_delay = error_restart_delay
        self.on_error = on_error or _log_error

        self.state = SessionState.IDLE
        self.listening_enabled = True
        self._epoch = 0
        self._closed = False
        self._capability_reported = False
        self._restart_handle: Optional[asyncio.TimerHandle] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def wake_word(self) -> str:
        return self.assistant_name.strip().lower()

    @property
    def muted(self) -> bool:
        return self.speaker.muted

    def _transition(self, target: SessionState) -> None:
        if target is self.state:
            return
        if target not in _TRANSITIONS[self.state]:
            raise IllegalTransition(self.state, target)
        if target in (SessionState.PROCESSING, SessionState.SPEAKING) and self.recognizer.active:
            self.recognizer.stop()
        logger.debug(f"Session {self.state.value} -> {target.value}")
        self.state = target

    def _report(self, error: Exception) -> None:
        try:
            self.on_error(error)
        except Exception as e:
            logger.error(f"Error callback failed: {e}")

    def _report_capability(self, error: SpeechCapabilityError) -> None:
        if self._capability_reported:
            return
        self._capability_reported = True
        logger.error(error.user_message)
        self._report(error)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Begin listening; False if speech recognition is unavailable."""
        if not self.recognizer.available:
            self._report_capability(SpeechCapabilityError())
            return False

        self._closed = False
        self.listening_enabled = True
        if self.state is SessionState.IDLE:
            self._transition(SessionState.LISTENING)
        self._arm_recognition()
        logger.info(f"Assistant session started (wake word: {self.assistant_name!r})")
        return True

    def close(self) -> None:
        """Tear down: drop in-flight work, silence speech, forget history."""
        self._closed = True
        self._epoch += 1
        self._cancel_restart()
        self.speaker.cancel()
        if self.recognizer.active:
            self.recognizer.stop()
        self.history.clear()
        self._transition(SessionState.IDLE)
        logger.info("Assistant session closed")

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    async def handle_transcript(self, text: str) -> Optional[Action]:
        """Final recognizer transcript; only acted on if it names the assistant."""
        if self.state is not SessionState.LISTENING:
            logger.debug(f"Ignoring transcript while {self.state.value}")
            return None

        transcript = (text or "").strip()
        if not transcript or self.wake_word not in transcript.lower():
            logger.debug(f"No wake word in transcript: {transcript!r}")
            return None

        return await self._process(transcript)

    async def submit_text(self, command: str) -> Optional[Action]:
        """
        Typed command; bypasses the wake word.

        Works while listening is disabled too: the session goes IDLE ->
        PROCESSING and, once answered, back to IDLE. A command submitted
        while busy preempts the current one.
        """
        command = (command or "").strip()
        if not command or self._closed:
            return None
        if self.state in (SessionState.PROCESSING, SessionState.SPEAKING):
            self.stop_assistant()
        return await self._process(command)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def _process(self, command: str) -> Optional[Action]:
        self._cancel_restart()
        self._epoch += 1
        epoch = self._epoch
        self._transition(SessionState.PROCESSING)

        try:
            intent = await self.classify(command)
        except AssistantRequestError as e:
            if epoch != self._epoch:
                return None
            logger.warning(f"Command failed: {e.user_message}")
            self._report(e)
            await self._respond(epoch, command, Action("error", e.user_message), record=False)
            return None
        except Exception as e:
            if epoch != self._epoch:
                return None
            logger.error(f"Unexpected error processing command: {e}", exc_info=True)
            self._report(e)
            await self._respond(epoch, command, Action("error", GENERIC_APOLOGY), record=False)
            return None

        if epoch != self._epoch:
            logger.info("Discarding result of a cancelled command")
            return None

        action = self.dispatcher.dispatch(intent)
        await self._respond(epoch, command, action, record=True)
        return action

    async def _respond(self, epoch: int, command: str, action: Action, record: bool) -> None:
        self._transition(SessionState.SPEAKING)

        if action.url:
            try:
                self.opener(action.url)
            except Exception as e:
                logger.error(f"Failed to open {action.url}: {e}")

        await self.speaker.say(action.speech)

        if epoch != self._epoch:
            return

        if record:
            self.history.add(ConversationTurn(command, action.speech, action.intent_type))
        self._resume()

    def _resume(self) -> None:
        if self._closed:
            return
        if self.listening_enabled and self.recognizer.available:
            self._transition(SessionState.LISTENING)
            self._arm_recognition()
        else:
            self._transition(SessionState.IDLE)

    def stop_assistant(self) -> bool:
        """Abort the current command or utterance and go back to listening."""
        if self.state not in (SessionState.PROCESSING, SessionState.SPEAKING):
            return False
        self._epoch += 1
        self.speaker.cancel()
        logger.info("Assistant stopped by user")
        self._resume()
        return True

    # ------------------------------------------------------------------
    # Recognition lifecycle
    # ------------------------------------------------------------------

    def _arm_recognition(self) -> None:
        if self._closed or not self.listening_enabled or self.state is not SessionState.LISTENING:
            return
        if self.recognizer.active:
            return
        try:
            self.recognizer.start()
        except SpeechCapabilityError as e:
            self._disable_listening(e)
        except Exception as e:
            logger.error(f"Failed to start recognition: {e}")
            self._schedule_restart(self.error_restart_delay)

    def _cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _schedule_restart(self, delay: float) -> None:
        self._cancel_restart()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._arm_recognition()
            return
        self._restart_handle = loop.call_later(delay, self._restart_fired)

    def _restart_fired(self) -> None:
        self._restart_handle = None
        self._arm_recognition()

    def _disable_listening(self, error: SpeechCapabilityError) -> None:
        self.listening_enabled = False
        self._cancel_restart()
        if self.recognizer.active:
            self.recognizer.stop()
        if self.state is SessionState.LISTENING:
            self._transition(SessionState.IDLE)
        self._report_capability(error)

    def handle_recognition_end(self) -> None:
        """Recognizer stopped on its own; re-arm unless busy."""
        if self._closed or not self.listening_enabled:
            return
        if self.state is SessionState.LISTENING:
            self._schedule_restart(self.restart_delay)

    def handle_recognition_error(self, code: str) -> Exception:
        error = recognition_error(code)
        if isinstance(error, SpeechCapabilityError):
            self._disable_listening(error)
            return error

        logger.warning(f"Recognition error: {code}")
        if not self._closed and self.listening_enabled and self.state is SessionState.LISTENING:
            self._schedule_restart(self.error_restart_delay)
        return error

    def reconcile(self) -> bool:
        """Watchdog tick; True if recognition had to be re-armed."""
        if self._closed or not self.listening_enabled or self.state is not SessionState.LISTENING:
            return False
        if self.recognizer.active or self._restart_handle is not None:
            return False
        logger.info("Recognizer idle while listening, restarting")
        self._arm_recognition()
        return self.recognizer.active

    async def run_watchdog(self, interval: float = 2.0) -> None:
        while not self._closed:
            await asyncio.sleep(interval)
            if self._closed:
                break
            self.reconcile()

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def set_listening_enabled(self, enabled: bool) -> None:
        self.listening_enabled = enabled
        if enabled:
            if self.state is SessionState.IDLE and self.recognizer.available and not self._closed:
                self._transition(SessionState.LISTENING)
            self._arm_recognition()
            return

        self._cancel_restart()
        if self.recognizer.active:
            self.recognizer.stop()
        if self.state is SessionState.LISTENING:
            self._transition(SessionState.IDLE)

    def set_muted(self, muted: bool) -> None:
        """Silence speech; recognition is left alone."""
        self.speaker.set_muted(muted)
        logger.info("Assistant muted" if muted else "Assistant unmuted")
