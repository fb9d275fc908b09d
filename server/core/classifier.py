"""Intent Classifier Gateway: turns a spoken command into an IntentRecord."""
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from core.errors import ClassificationError, ClassificationFailure, ValidationError
from integrations.gemini.client import GeminiClient, extract_json_object
from integrations.gemini.prompts import build_intent_prompt
from models.intent import IntentRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("type", "userInput", "response")


class IntentClassifier:
    """
    Treats the remote model as an untrusted, loosely structured oracle:
    prose around the JSON payload is tolerated, anything that is not a
    complete intent record becomes a typed ClassificationError.
    """

    def __init__(self, gemini_client: GeminiClient):
        self.gemini = gemini_client

    async def classify(
        self,
        command: str,
        assistant_name: str,
        user_name: str,
    ) -> IntentRecord:
        if not command or not command.strip():
            raise ValidationError("Command is required and must be a non-empty string")
        if not assistant_name or not assistant_name.strip():
            raise ValidationError("Assistant name is required")
        if not user_name or not user_name.strip():
            raise ValidationError("User name is required")

        prompt = build_intent_prompt(
            command=command.strip(),
            assistant_name=assistant_name.strip(),
            user_name=user_name.strip(),
        )
        response_text = await self.gemini.generate(prompt)

        record = parse_intent(response_text)
        logger.info(f"Classified command as {record.type.value}")
        return record


def parse_intent(response_text: str) -> IntentRecord:
    """Extract and validate an IntentRecord from raw model output."""
    try:
        payload = json.loads(extract_json_object(response_text))
    except ValueError as e:
        logger.error(f"Failed to parse classifier output: {e}")
        logger.debug(f"Raw response: {response_text[:500]}")
        raise ClassificationError(
            ClassificationFailure.MALFORMED_RESPONSE,
            "invalid response structure",
        ) from e

    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(payload.get(name), str) or not payload[name].strip()
    ]
    if missing:
        logger.error(f"Classifier output missing fields: {missing}")
        logger.debug(f"Raw response: {response_text[:500]}")
        raise ClassificationError(
            ClassificationFailure.MALFORMED_RESPONSE,
            "invalid response structure",
        )

    try:
        return IntentRecord(
            type=payload["type"],
            userInput=payload["userInput"],
            response=payload["response"],
        )
    except PydanticValidationError as e:
        raise ClassificationError(
            ClassificationFailure.MALFORMED_RESPONSE,
            "invalid response structure",
        ) from e
