"""Logging configuration for the console client."""
import logging
import sys
from typing import Optional, TextIO


def setup_logging(log_level: str = "INFO", stream: Optional[TextIO] = None):
    """Configure client logging; ``stream`` defaults to stdout."""

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)

    # Replace our own handler only, so a second call does not duplicate output
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        if getattr(handler, "_voice_client_console", False):
            root_logger.removeHandler(handler)
    console_handler._voice_client_console = True
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
