"""SMTP email transport.

Sends HTML email through the configured SMTP server. Port 465 uses implicit
SSL; any other port upgrades the session with STARTTLS.
"""

import re
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from html import unescape
from typing import Any, Dict

from pydantic import BaseModel

from infrastructure.configuration.integrations.smtp import SmtpSettings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import (
    EmailConfigurationError,
    EmailTransportError,
)

logger = get_module_logger()

SSL_PORT = 465


class EmailSendResult(BaseModel):
    message_id: str


def html_to_text(html: str) -> str:
    """Crude plain-text alternative for clients that do not render HTML."""
    text = re.sub(r"<br\s*/?>|</p>|</div>|</h\d>", "\n", html, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    lines = [line.strip() for line in unescape(text).splitlines()]
    return "\n".join(line for line in lines if line)


class SmtpEmailTransport:
    """Email transport backed by ``smtplib``.

    Args:
        settings: SMTP settings (host, port, credentials, sender)
    """

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def build_message(
        self, to_address: str, subject: str, html_body: str
    ) -> EmailMessage:
        sender = self._settings.sender_address
        domain = sender.split("@")[-1] if sender and "@" in sender else None

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self._settings.EMAIL_FROM_NAME, sender))
        message["To"] = to_address
        message["Message-ID"] = make_msgid(domain=domain)
        message.set_content(html_to_text(html_body) or subject)
        message.add_alternative(html_body, subtype="html")
        return message

    def send(self, to_address: str, subject: str, html_body: str) -> EmailSendResult:
        """Send one HTML email.

        Returns:
            EmailSendResult with the generated Message-ID

        Raises:
            EmailConfigurationError: Host or credentials missing
            EmailTransportError: Connection, authentication or delivery failure
        """
        if not self.is_configured:
            raise EmailConfigurationError(
                "Email configuration missing: EMAIL_HOST, EMAIL_USER and "
                "EMAIL_PASSWORD must be set"
            )

        message = self.build_message(to_address, subject, html_body)
        host = self._settings.EMAIL_HOST
        port = self._settings.EMAIL_PORT
        timeout = self._settings.SMTP_TIMEOUT_SECONDS
        context = ssl.create_default_context()

        try:
            if port == SSL_PORT:
                server = smtplib.SMTP_SSL(host, port, timeout=timeout, context=context)
            else:
                server = smtplib.SMTP(host, port, timeout=timeout)
            with server:
                if port != SSL_PORT:
                    server.starttls(context=context)
                server.login(self._settings.EMAIL_USER, self._settings.EMAIL_PASSWORD)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "email_send_failed",
                host=host,
                port=port,
                error=str(e),
            )
            raise EmailTransportError(f"Email could not be sent: {e}") from e

        logger.info("email_sent", message_id=message["Message-ID"])
        return EmailSendResult(message_id=message["Message-ID"])

    def describe(self) -> Dict[str, Any]:
        """Transport status for monitoring."""
        return {
            "provider": "smtp",
            "enabled": self.is_configured,
            "host": self._settings.EMAIL_HOST,
            "port": self._settings.EMAIL_PORT,
        }
