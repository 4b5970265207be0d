"""Development notifier that records dispatches in the log."""

from __future__ import annotations

import logging

from useradmin.common.logging import log_context

logger = logging.getLogger(__name__)


class LogCredentialNotifier:
    """Log credential dispatches without sending mail. The password is never logged."""

    def send_credentials(self, *, recipient: str, name: str, password: str) -> None:
        logger.info(
            "mail.credentials.logged",
            extra=log_context(recipient=recipient, backend="log", password_length=len(password)),
        )


__all__ = ["LogCredentialNotifier"]
