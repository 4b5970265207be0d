"""Post-commit delivery of generated credentials."""

from __future__ import annotations

from useradmin.settings import Settings

from .base import CredentialNotifier, NotificationError, render_credentials_body
from .log import LogCredentialNotifier
from .smtp import SmtpCredentialNotifier


def build_notifier(settings: Settings) -> CredentialNotifier:
    """Pick the notifier named by ``USERADMIN_MAIL_BACKEND``."""
    if settings.mail_backend == "smtp":
        return SmtpCredentialNotifier(settings)
    return LogCredentialNotifier()


__all__ = [
    "CredentialNotifier",
    "LogCredentialNotifier",
    "NotificationError",
    "SmtpCredentialNotifier",
    "build_notifier",
    "render_credentials_body",
]
