"""Test helpers shared across unit and integration suites."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from useradmin.settings import Settings


@dataclass(frozen=True, slots=True)
class SentCredential:
    recipient: str
    name: str
    password: str


@dataclass
class RecordingNotifier:
    """Captures credential dispatches; set ``fail_with`` to simulate a transport error."""

    sent: list[SentCredential] = field(default_factory=list)
    fail_with: Exception | None = None

    def send_credentials(self, *, recipient: str, name: str, password: str) -> None:
        self.sent.append(SentCredential(recipient=recipient, name=name, password=password))
        if self.fail_with is not None:
            raise self.fail_with


def as_user(user: Any, settings: Settings) -> dict[str, str]:
    """Headers that make ``user`` (anything with an ``id``) the acting principal."""
    return {settings.auth_user_header: str(user.id)}


__all__ = ["RecordingNotifier", "SentCredential", "as_user"]
