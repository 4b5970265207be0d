"""SMTP delivery of credential emails."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from useradmin.common.logging import log_context
from useradmin.settings import Settings

from .base import NotificationError, render_credentials_body

logger = logging.getLogger(__name__)


class SmtpCredentialNotifier:
    """Send credential emails through an SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build_message(self, *, recipient: str, name: str, password: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._settings.mail_from
        message["To"] = recipient
        message["Subject"] = self._settings.mail_subject
        message.set_content(
            render_credentials_body(
                name=name,
                recipient=recipient,
                password=password,
                login_url=self._settings.login_url,
            )
        )
        return message

    def send_credentials(self, *, recipient: str, name: str, password: str) -> None:
        settings = self._settings
        message = self.build_message(recipient=recipient, name=name, password=password)
        try:
            with smtplib.SMTP(
                settings.smtp_host,
                settings.smtp_port,
                timeout=settings.smtp_timeout_seconds,
            ) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_username:
                    server.login(settings.smtp_username, settings.smtp_password_value or "")
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP delivery to {recipient} failed: {exc}") from exc

        logger.info(
            "mail.credentials.sent",
            extra=log_context(recipient=recipient, backend="smtp", host=settings.smtp_host),
        )


__all__ = ["SmtpCredentialNotifier"]
