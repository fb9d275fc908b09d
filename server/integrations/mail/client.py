"""SMTP mail client built on aiosmtplib."""
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from config.settings import settings
from core.errors import ConfigurationError, MailDeliveryError
import logging

logger = logging.getLogger(__name__)

# Port 465 speaks TLS from the first byte; everything else upgrades with STARTTLS
IMPLICIT_TLS_PORT = 465


class MailClient:
    """Sends one message per call; holds no connection between sends."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username or settings.SMTP_USERNAME
        self.password = password or settings.SMTP_PASSWORD
        self.sender = sender or settings.SMTP_FROM or self.username
        self.timeout = timeout or settings.SMTP_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.sender)

    def build_message(self, to: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        if not self.is_configured:
            logger.error("SMTP_HOST / SMTP_FROM are not configured")
            raise ConfigurationError(
                "Missing required environment variable: SMTP_HOST",
                user_message="Email delivery is not configured. Please contact support.",
            )

        message = self.build_message(to, subject, text, html)
        implicit_tls = self.port == IMPLICIT_TLS_PORT
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=implicit_tls,
                start_tls=not implicit_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Sending mail to {to} failed: {e}")
            raise MailDeliveryError(str(e), retryable=True) from e

        logger.info(f"Mail sent to {to}: {subject!r}")
