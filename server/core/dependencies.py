"""
Shared singleton dependencies for the application.

The Gemini HTTP client and the classifier gateway are created once at
startup and reused across requests. Services and repositories are thin
wrappers and are built per request.
"""
import logging
from typing import Optional

from config.settings import settings
from core.classifier import IntentClassifier
from core.errors import ConfigurationError
from database.client import get_supabase
from database.repositories.history_repo import CommandHistoryRepository
from database.repositories.password_reset_repo import PasswordResetRepository
from database.repositories.user_repo import UserRepository
from integrations.gemini.client import GeminiClient
from integrations.mail.client import MailClient
from services.assistant_service import AssistantService
from services.auth_service import AuthService
from services.avatar_service import AvatarService
from services.password_reset_service import PasswordResetService

logger = logging.getLogger(__name__)

# Module-level singletons, initialized once via init_dependencies()
_gemini_client: Optional[GeminiClient] = None
_classifier: Optional[IntentClassifier] = None


def init_dependencies() -> None:
    """
    Initialize all shared singletons. Called once at application startup.

    Raises ConfigurationError when the classifier credentials are missing.
    """
    global _gemini_client, _classifier

    if not settings.GEMINI_API_KEY or not settings.GEMINI_API_URL:
        logger.critical("GEMINI_API_KEY / GEMINI_API_URL are not configured")
        raise ConfigurationError("Missing required environment variable: GEMINI_API_KEY")

    logger.info("Initializing shared dependencies...")
    _gemini_client = GeminiClient()
    _classifier = IntentClassifier(_gemini_client)
    logger.info(f"Intent classifier ready (timeout {settings.GEMINI_TIMEOUT}s)")


async def shutdown_dependencies() -> None:
    """Clean up resources on shutdown."""
    global _gemini_client, _classifier
    if _gemini_client:
        await _gemini_client.close()
        logger.info("GeminiClient closed")
    _gemini_client = None
    _classifier = None


def get_classifier() -> IntentClassifier:
    if _classifier is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")
    return _classifier


def get_user_repo() -> UserRepository:
    return UserRepository(get_supabase())


def get_auth_service() -> AuthService:
    return AuthService(get_user_repo())


def get_avatar_service() -> AvatarService:
    return AvatarService(get_supabase())


def get_password_reset_service() -> PasswordResetService:
    return PasswordResetService(
        user_repo=get_user_repo(),
        reset_repo=PasswordResetRepository(get_supabase()),
        mailer=MailClient(),
    )


def get_assistant_service() -> AssistantService:
    """
    Build an AssistantService around the shared classifier.

    WARNING: the service and its repository are created per request and
    MUST remain stateless.
    """
    return AssistantService(
        classifier=get_classifier(),
        history_repo=CommandHistoryRepository(get_supabase()),
    )
