"""Client configuration, read from the environment (and a local .env)."""
import os

from dotenv import load_dotenv

load_dotenv()


def _float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


SERVER_URL = os.getenv("ASSISTANT_SERVER_URL", "http://localhost:8000").strip()
EMAIL = os.getenv("ASSISTANT_EMAIL", "").strip()
PASSWORD = os.getenv("ASSISTANT_PASSWORD", "")
ACCESS_TOKEN = os.getenv("ASSISTANT_ACCESS_TOKEN", "").strip()
TIMEZONE = os.getenv("ASSISTANT_TIMEZONE", "").strip() or None
LOG_LEVEL = os.getenv("ASSISTANT_LOG_LEVEL", "INFO").strip().upper()

REQUEST_TIMEOUT = _float("ASSISTANT_REQUEST_TIMEOUT", 30.0)
WATCHDOG_INTERVAL = _float("ASSISTANT_WATCHDOG_INTERVAL", 2.0)
RESTART_DELAY = _float("ASSISTANT_RESTART_DELAY", 0.5)
ERROR_RESTART_DELAY = _float("ASSISTANT_ERROR_RESTART_DELAY", 1.0)
