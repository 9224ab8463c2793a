"""Tests for the SMTP mailer."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from jolly_auth.config import Settings
from jolly_auth.services.mailer import Mailer, MailerError, render_template


def _mailer() -> Mailer:
    settings = Settings()
    settings.EMAIL_HOST = "smtp.test"
    settings.EMAIL_PORT = 2525
    settings.EMAIL_USER = "noreply@jolly.test"
    settings.EMAIL_PASS = "hunter2"
    return Mailer(settings)


def test_send_builds_html_message():
    with patch("jolly_auth.services.mailer.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
        asyncio.run(_mailer().send("Subject", "<p>Hi</p>", "ann@x.com"))

    message = mock_send.call_args.args[0]
    assert message["Subject"] == "Subject"
    assert message["To"] == "ann@x.com"
    assert message["From"] == "noreply@jolly.test"
    assert message.get_content_type() == "text/html"
    assert mock_send.call_args.kwargs["hostname"] == "smtp.test"
    assert mock_send.call_args.kwargs["port"] == 2525
    assert mock_send.call_args.kwargs["username"] == "noreply@jolly.test"


def test_transport_failure_raises_mailer_error():
    failure = AsyncMock(side_effect=aiosmtplib.SMTPConnectError("refused"))
    with patch("jolly_auth.services.mailer.aiosmtplib.send", failure):
        with pytest.raises(MailerError):
            asyncio.run(_mailer().send("Subject", "<p>Hi</p>", "ann@x.com"))


def test_reset_template_escapes_name():
    body = render_template(
        "reset_password_email.html",
        name="<script>",
        reset_url="http://frontend.test/resetpassword/abc1",
        expire_minutes=30,
    )
    assert "&lt;script&gt;" in body
    assert "http://frontend.test/resetpassword/abc1" in body
    assert "valid for 30 minutes" in body
