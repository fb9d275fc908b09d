"""Terminal adapters: typed lines stand in for transcripts, stdout for speech."""
import asyncio
import logging
import sys
from typing import Optional, TextIO

from voice_client.session import AssistantSession

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /say <text>      send a command without the wake word
  /stop            stop the current answer
  /mute, /unmute   silence or restore speech
  /listen on|off   toggle listening
  /history         show recent turns
  /quit            exit
Anything else is treated as a spoken transcript while listening."""


class ConsoleRecognizer:
    """Recognizer whose 'microphone' is a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self._active = False

    @property
    def available(self) -> bool:
        return self.stream is not None and not self.stream.closed

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._active = True

    def stop(self) -> None:
        self._active = False

    async def readline(self) -> Optional[str]:
        """Next line, or None at end of input."""
        line = await asyncio.to_thread(self.stream.readline)
        if line == "":
            return None
        return line.rstrip("\n")


class ConsoleSynthesizer:
    """Prints the utterance and holds for roughly the time it takes to say it."""

    def __init__(self, out: Optional[TextIO] = None, words_per_second: float = 3.0):
        self.out = out or sys.stdout
        self.words_per_second = words_per_second

    async def speak(self, text: str) -> None:
        print(f"assistant> {text}", file=self.out, flush=True)
        words = len(text.split())
        if self.words_per_second > 0:
            await asyncio.sleep(words / self.words_per_second)

    def cancel(self) -> None:
        pass


class ConsoleController:
    """Reads lines and routes them to the session."""

    def __init__(self, session: AssistantSession, recognizer: ConsoleRecognizer, out: Optional[TextIO] = None):
        self.session = session
        self.recognizer = recognizer
        self.out = out or sys.stdout
        self._tasks: set[asyncio.Task] = set()

    def _print(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def handle_command(self, line: str) -> bool:
        """Apply a slash command; False means quit."""
        name, _, arg = line.partition(" ")
        arg = arg.strip()

        if name == "/quit":
            return False
        if name == "/stop":
            if not self.session.stop_assistant():
                self._print("Nothing to stop.")
        elif name == "/mute":
            self.session.set_muted(True)
        elif name == "/unmute":
            self.session.set_muted(False)
        elif name == "/listen":
            if arg not in ("on", "off"):
                self._print("Usage: /listen on|off")
            else:
                self.session.set_listening_enabled(arg == "on")
        elif name == "/say":
            if arg:
                self._spawn(self.session.submit_text(arg))
            else:
                self._print("Usage: /say <text>")
        elif name == "/history":
            turns = self.session.history.recent()
            if not turns:
                self._print("No conversation yet.")
            for turn in turns:
                self._print(f"[{turn.timestamp:%H:%M:%S}] you: {turn.user_text}")
                self._print(f"           {self.session.assistant_name}: {turn.assistant_text}")
        else:
            self._print(HELP_TEXT)
        return True

    async def run(self) -> None:
        self._print(f"Say something with '{self.session.assistant_name}' in it. /help for commands.")
        while True:
            line = await self.recognizer.readline()
            if line is None:
                break
            line = line.strip()
            if not line:
                continue
            if line.startswith("/"):
                if not self.handle_command(line):
                    break
                continue
            if not self.recognizer.active:
                logger.debug(f"Not listening, dropped: {line!r}")
                continue
            self._spawn(self.session.handle_transcript(line))

        for task in list(self._tasks):
            task.cancel()
