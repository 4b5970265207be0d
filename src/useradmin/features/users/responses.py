"""Translate lifecycle outcomes into HTTP errors."""

from __future__ import annotations

from typing import NoReturn

from fastapi import status

from useradmin.common.outcomes import Denied, Failure, FailureReason, Invalid
from useradmin.common.problem_details import ApiError, ProblemDetailsErrorItem
from useradmin.core.auth.principal import Principal


def raise_for_outcome(
    outcome: Denied | Invalid | Failure,
    *,
    principal: Principal | None,
) -> NoReturn:
    """Raise the :class:`ApiError` matching a non-success outcome."""

    match outcome:
        case Denied() if principal is None:
            raise ApiError(
                error_type="unauthorized",
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
            )
        case Denied(message=message):
            raise ApiError(
                error_type="forbidden",
                status_code=status.HTTP_403_FORBIDDEN,
                detail=message,
            )
        case Invalid(errors=errors, message=message):
            raise ApiError(
                error_type="validation_error",
                status_code=422,
                detail=message,
                errors=[
                    ProblemDetailsErrorItem(path=e.field, message=e.message, code=e.code)
                    for e in errors
                ],
            )
        case Failure(message=message, reason=FailureReason.NOT_FOUND):
            raise ApiError(
                error_type="not_found",
                status_code=status.HTTP_404_NOT_FOUND,
                detail=message,
            )
        case Failure(message=message, reason=FailureReason.NOTIFICATION):
            raise ApiError(
                error_type="notification_failed",
                title="Notification failed",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            )
        case Failure(message=message):
            raise ApiError(
                error_type="internal_error",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            )
    raise TypeError(f"Unsupported outcome: {outcome!r}")


__all__ = ["raise_for_outcome"]
