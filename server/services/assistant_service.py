"""Assistant service: classify a command, localize clock answers, log history."""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
import logging

from config.settings import settings
from core.classifier import IntentClassifier
from core.clock import local_answer, now_in
from core.errors import ClassificationError, ValidationError
from database.repositories.history_repo import CommandHistoryRepository
from models.intent import IntentType, LOCAL_CLOCK_INTENTS

logger = logging.getLogger(__name__)

DEFAULT_ASSISTANT_NAME = "Assistant"
UNKNOWN_COMMAND_RESPONSE = "I didn't understand the command. Please try rephrasing it."


def normalize_command(command: Optional[str]) -> str:
    """Trim and bound a raw command; blank input is a ValidationError."""
    if not isinstance(command, str) or not command.strip():
        raise ValidationError("Command is required and must be a non-empty string")
    return command.strip()[: settings.COMMAND_MAX_LENGTH]


class AssistantService:
    """Glue between the HTTP layer, the classifier gateway and the history log."""

    def __init__(
        self,
        classifier: IntentClassifier,
        history_repo: CommandHistoryRepository,
    ):
        self.classifier = classifier
        self.history_repo = history_repo

    async def ask(
        self,
        user: dict,
        command: str,
        timezone_name: Optional[str] = None,
    ) -> dict:
        """
        Classify ``command`` on behalf of ``user``.

        Returns: {success, type, userInput, response, timestamp}
        Raises: ValidationError, ClassificationError
        """
        command = normalize_command(command)
        user_id = UUID(str(user["id"]))
        assistant_name = user.get("assistant_name") or DEFAULT_ASSISTANT_NAME
        user_name = user.get("name") or "User"

        try:
            intent = await self.classifier.classify(command, assistant_name, user_name)
        except ClassificationError as e:
            logger.error(f"Classification failed for user {user_id} ({e.cause.value}): {e}")
            await self._record(user_id, command)
            raise

        response_text = intent.response
        if intent.type in LOCAL_CLOCK_INTENTS:
            response_text = local_answer(
                intent.type, now_in(timezone_name or settings.ASSISTANT_TIMEZONE)
            )
        elif intent.type is IntentType.UNKNOWN:
            logger.warning(f"Classifier returned an unrecognized intent for user {user_id}")
            response_text = UNKNOWN_COMMAND_RESPONSE

        await self._record(user_id, command, response_text, intent.type.value)

        return {
            "success": True,
            "type": intent.type.value,
            "userInput": intent.userInput,
            "response": response_text,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def history(self, user: dict, limit: int) -> list[dict]:
        limit = max(1, min(limit, settings.COMMAND_HISTORY_LIMIT))
        return await self.history_repo.list_recent(UUID(str(user["id"])), limit)

    async def _record(
        self,
        user_id: UUID,
        command: str,
        response: Optional[str] = None,
        intent_type: Optional[str] = None,
    ) -> None:
        # The audit log must never fail the user's request
        try:
            await self.history_repo.append(
                user_id,
                command,
                limit=settings.COMMAND_HISTORY_LIMIT,
                response=response,
                intent_type=intent_type,
            )
        except Exception as e:
            logger.error(f"Could not record command history for user {user_id}: {e}")
