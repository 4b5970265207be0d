"""Uniform results for mutating and listing operations.

Every lifecycle operation returns exactly one of :class:`Success`,
:class:`Denied`, :class:`Invalid` or :class:`Failure`. Callers dispatch on the
concrete type (``match`` or ``isinstance``); nothing here raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_DENIED_MESSAGE = "This action is unauthorized."
DEFAULT_INVALID_MESSAGE = "The given data was invalid."


class FailureReason(str, Enum):
    """Why an authorized, valid operation still failed."""

    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"
    NOTIFICATION = "notification"


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str
    code: str | None = None


@dataclass(frozen=True, slots=True)
class Success[T]:
    value: T
    message: str | None = None
    redirect_to: str | None = None


@dataclass(frozen=True, slots=True)
class Denied:
    message: str = DEFAULT_DENIED_MESSAGE


@dataclass(frozen=True, slots=True)
class Invalid:
    errors: tuple[FieldError, ...] = field(default_factory=tuple)
    message: str = DEFAULT_INVALID_MESSAGE

    def fields(self) -> set[str]:
        return {error.field for error in self.errors}


@dataclass(frozen=True, slots=True)
class Failure[T]:
    """An operation that was allowed to run but did not complete cleanly.

    ``message`` is safe to show to the caller. ``value`` carries the committed
    result when only the post-commit side effect failed.
    """

    message: str
    reason: FailureReason = FailureReason.PERSISTENCE
    value: T | None = None


type Outcome[T] = Success[T] | Denied | Invalid | Failure[T]


__all__ = [
    "DEFAULT_DENIED_MESSAGE",
    "DEFAULT_INVALID_MESSAGE",
    "Denied",
    "Failure",
    "FailureReason",
    "FieldError",
    "Invalid",
    "Outcome",
    "Success",
]
