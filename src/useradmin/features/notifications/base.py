"""Credential notification contract."""

from __future__ import annotations

from typing import Protocol


class NotificationError(RuntimeError):
    """Raised when a credential message could not be handed to the transport."""


class CredentialNotifier(Protocol):
    """Delivers a newly generated one-time credential to its owner."""

    def send_credentials(self, *, recipient: str, name: str, password: str) -> None: ...


def render_credentials_body(*, name: str, recipient: str, password: str, login_url: str | None) -> str:
    lines = [
        f"Hello {name},",
        "",
        "An account has been created for you.",
        "",
        f"Email: {recipient}",
        f"Password: {password}",
        "",
    ]
    if login_url:
        lines.extend([f"Sign in at {login_url}", ""])
    lines.append("Please change this password after your first sign-in.")
    return "\n".join(lines)


__all__ = ["CredentialNotifier", "NotificationError", "render_credentials_body"]
