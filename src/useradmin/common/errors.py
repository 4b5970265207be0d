"""Exception taxonomy for lifecycle operations.

Services raise these inside a transaction; :mod:`useradmin.common.lifecycle`
turns them into outcomes. :func:`useradmin.common.lifecycle.unwrap` goes the
other way for callers (the CLI) that prefer exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable

from .outcomes import FieldError


class LifecycleError(Exception):
    """Base class for failures surfaced by lifecycle operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthorizationDenied(LifecycleError):
    """The acting principal lacks the permission required for the action."""


class ValidationFailed(LifecycleError):
    """One or more input fields were rejected before any mutation ran."""

    def __init__(
        self,
        errors: Iterable[FieldError],
        message: str = "The given data was invalid.",
    ) -> None:
        super().__init__(message)
        self.errors = tuple(errors)

    @classmethod
    def for_field(cls, field: str, message: str, *, code: str | None = None) -> ValidationFailed:
        return cls([FieldError(field=field, message=message, code=code)])


class ResourceNotFound(LifecycleError):
    """The target of an update or delete does not exist."""


class PersistenceFailure(LifecycleError):
    """The transaction could not be committed."""


class NotificationFailure(LifecycleError):
    """The mutation committed but its post-commit side effect failed."""

    def __init__(self, message: str, *, value: object | None = None) -> None:
        super().__init__(message)
        self.value = value


__all__ = [
    "AuthorizationDenied",
    "LifecycleError",
    "NotificationFailure",
    "PersistenceFailure",
    "ResourceNotFound",
    "ValidationFailed",
]
