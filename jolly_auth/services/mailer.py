"""Outbound email over SMTP."""

import logging
from email.mime.text import MIMEText
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from jolly_auth.config import Settings, get_settings

logger = logging.getLogger("jolly_auth")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


class MailerError(Exception):
    """Raised when the SMTP transport fails to deliver a message."""


def render_template(template_name: str, **context) -> str:
    """Render an email template from the package templates directory."""
    return _templates.get_template(template_name).render(**context)


class Mailer:
    """Sends HTML email through the configured SMTP server."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.EMAIL_HOST
        self.port = settings.EMAIL_PORT
        self.username = settings.EMAIL_USER
        self.password = settings.EMAIL_PASS
        self.default_sender = settings.EMAIL_USER

    def _build_message(self, subject: str, body: str, send_to: str, sent_from: str) -> MIMEText:
        msg = MIMEText(body, "html", "utf-8")
        msg["From"] = sent_from
        msg["To"] = send_to
        msg["Subject"] = subject
        return msg

    async def send(self, subject: str, body: str, send_to: str, sent_from: str | None = None) -> None:
        """Send a single HTML email. Raises MailerError on any transport failure."""
        message = self._build_message(subject, body, send_to, sent_from or self.default_sender)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=True,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailerError(str(e)) from e
        logger.info("Email '%s' sent to %s", subject, send_to)


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Get singleton mailer instance."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer(get_settings())
    return _mailer
