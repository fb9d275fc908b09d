"""Tests for the SMTP mail client."""
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from core.errors import ConfigurationError, MailDeliveryError
from integrations.mail.client import MailClient


def _client(**overrides):
    options = dict(
        host="smtp.test", port=587, username="bot@test", password="pw",
        sender="Assistant <bot@test>", timeout=5,
    )
    options.update(overrides)
    return MailClient(**options)


@pytest.mark.asyncio
async def test_send_uses_starttls_on_submission_port():
    with patch("integrations.mail.client.aiosmtplib.send", new=AsyncMock()) as send:
        await _client().send("ada@example.com", "Hi", "plain body", "<p>html body</p>")

    message = send.call_args.args[0]
    assert message["To"] == "ada@example.com"
    assert message["From"] == "Assistant <bot@test>"
    assert message["Subject"] == "Hi"
    assert message.get_body(("plain",)).get_content().strip() == "plain body"
    assert "html body" in message.get_body(("html",)).get_content()
    kwargs = send.call_args.kwargs
    assert kwargs["hostname"] == "smtp.test"
    assert kwargs["start_tls"] is True
    assert kwargs["use_tls"] is False


@pytest.mark.asyncio
async def test_send_uses_implicit_tls_on_465():
    with patch("integrations.mail.client.aiosmtplib.send", new=AsyncMock()) as send:
        await _client(port=465).send("ada@example.com", "Hi", "body")

    assert send.call_args.kwargs["use_tls"] is True
    assert send.call_args.kwargs["start_tls"] is False


@pytest.mark.asyncio
async def test_smtp_failure_becomes_delivery_error():
    failing = AsyncMock(side_effect=aiosmtplib.SMTPException("550 mailbox unavailable"))
    with patch("integrations.mail.client.aiosmtplib.send", new=failing):
        with pytest.raises(MailDeliveryError) as exc_info:
            await _client().send("ada@example.com", "Hi", "body")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_unconfigured_client_refuses_to_send(monkeypatch):
    monkeypatch.setattr("integrations.mail.client.settings.SMTP_HOST", None)
    monkeypatch.setattr("integrations.mail.client.settings.SMTP_FROM", None)
    monkeypatch.setattr("integrations.mail.client.settings.SMTP_USERNAME", None)
    client = MailClient()
    assert client.is_configured is False

    with patch("integrations.mail.client.aiosmtplib.send", new=AsyncMock()) as send:
        with pytest.raises(ConfigurationError):
            await client.send("ada@example.com", "Hi", "body")
    send.assert_not_awaited()
