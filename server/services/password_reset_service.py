"""Forgotten-password flow: mail a one-time code, then trade it for a new password."""
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import UUID

from config.settings import settings
from database.repositories.password_reset_repo import PasswordResetRepository
from database.repositories.user_repo import UserRepository
from integrations.mail import templates
from integrations.mail.client import MailClient
from services.auth_service import hash_password

logger = logging.getLogger(__name__)


def generate_code() -> str:
    """Six random digits, never starting with 0."""
    return str(secrets.randbelow(900000) + 100000)


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class PasswordResetService:
    """
    Two steps: ``send_code`` mails a code, ``reset_password`` redeems it.

    Lookup failures raise LookupError (HTTP 404) and bad or stale codes
    raise ValueError (HTTP 400), both with the message shown to the user.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        reset_repo: PasswordResetRepository,
        mailer: MailClient,
        ttl_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.user_repo = user_repo
        self.reset_repo = reset_repo
        self.mailer = mailer
        self.ttl_minutes = ttl_minutes or settings.PASSWORD_RESET_CODE_TTL_MINUTES
        self.clock = clock

    async def send_code(self, email: str) -> None:
        email = email.strip().lower()
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise LookupError("User not found.")

        code = generate_code()
        expires_at = self.clock() + timedelta(minutes=self.ttl_minutes)
        await self.reset_repo.replace_code(email, code, expires_at)
        await self.mailer.send(
            to=email,
            subject=templates.PASSWORD_RESET_SUBJECT,
            text=templates.password_reset_text(code, self.ttl_minutes),
            html=templates.password_reset_html(code, self.ttl_minutes),
        )
        logger.info(f"Password reset code sent to {email}")

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        email = email.strip().lower()
        record = await self.reset_repo.latest_code(email)
        if not record:
            raise ValueError("No OTP request found for this email.")

        now = self.clock()
        if now > _parse_timestamp(record["expires_at"]):
            await self.reset_repo.delete_codes(email)
            raise ValueError("OTP expired. Please request a new one.")

        if not hmac.compare_digest(str(record["code"]), code.strip()):
            raise ValueError("Invalid OTP.")

        # Lost a race with a concurrent reset using the same code
        if not await self.reset_repo.consume_code(record["id"], now):
            raise ValueError("No OTP request found for this email.")

        user = await self.user_repo.get_by_email(email)
        if not user:
            raise LookupError("User not found.")

        user_id = UUID(user["id"])
        await self.user_repo.update_password(user_id, hash_password(new_password))
        await self.user_repo.revoke_user_refresh_tokens(user_id)
        await self.reset_repo.delete_codes(email)
        logger.info(f"Password reset for {email}")
