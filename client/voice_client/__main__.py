"""Run a console assistant session: ``python -m voice_client``."""
import asyncio
import logging
import sys

from voice_client import config
from voice_client.api import AssistantApiClient
from voice_client.console import ConsoleController, ConsoleRecognizer, ConsoleSynthesizer
from voice_client.errors import AssistantRequestError
from voice_client.logging_config import setup_logging
from voice_client.session import AssistantSession
from voice_client.speech import Speaker

logger = logging.getLogger("voice_client")


async def run() -> int:
    api = AssistantApiClient(
        config.SERVER_URL,
        timeout=config.REQUEST_TIMEOUT,
        access_token=config.ACCESS_TOKEN,
    )
    try:
        if not api.access_token:
            if not config.EMAIL or not config.PASSWORD:
                print("Set ASSISTANT_EMAIL and ASSISTANT_PASSWORD (or ASSISTANT_ACCESS_TOKEN).", file=sys.stderr)
                return 2
            user = await api.login(config.EMAIL, config.PASSWORD)
        else:
            user = await api.current_user()
    except AssistantRequestError as e:
        print(f"Sign-in failed: {e.user_message}", file=sys.stderr)
        await api.close()
        return 1

    assistant_name = user.get("assistant_name") or "Assistant"
    logger.info(f"Signed in as {user.get('email')} (assistant: {assistant_name})")

    recognizer = ConsoleRecognizer()
    session = AssistantSession(
        recognizer,
        Speaker(ConsoleSynthesizer()),
        classify=lambda command: api.ask(command, timezone=config.TIMEZONE),
        assistant_name=assistant_name,
        restart_delay=config.RESTART_DELAY,
        error_restart_delay=config.ERROR_RESTART_DELAY,
        on_error=lambda error: print(f"! {getattr(error, 'user_message', error)}", file=sys.stderr),
    )

    watchdog = None
    try:
        if not session.start():
            return 1
        watchdog = asyncio.create_task(session.run_watchdog(config.WATCHDOG_INTERVAL))
        await ConsoleController(session, recognizer).run()
    finally:
        session.close()
        if watchdog is not None:
            watchdog.cancel()
        await api.close()
    return 0


def main():
    # stdout carries the conversation, so logs go to stderr
    setup_logging(config.LOG_LEVEL, stream=sys.stderr)
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
