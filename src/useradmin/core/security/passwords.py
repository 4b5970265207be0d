"""One-time credential generation."""

from __future__ import annotations

import secrets
import string

from useradmin.settings import MIN_GENERATED_PASSWORD_LENGTH

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
# No quotes, backslashes or whitespace so the value survives copy/paste from mail.
SYMBOLS = "!@#$%^&*()-_=+[]{}:;,.?"

_CHARACTER_CLASSES: tuple[str, ...] = (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS)
_ALPHABET = "".join(_CHARACTER_CLASSES)


def generate_password(length: int = 16) -> str:
    """Return a random password with at least one character from each class.

    ``length`` is clamped up to ``MIN_GENERATED_PASSWORD_LENGTH``.
    """

    target_length = max(length, MIN_GENERATED_PASSWORD_LENGTH)
    chars = [secrets.choice(pool) for pool in _CHARACTER_CLASSES]
    chars.extend(secrets.choice(_ALPHABET) for _ in range(target_length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


__all__ = ["DIGITS", "LOWERCASE", "SYMBOLS", "UPPERCASE", "generate_password"]
