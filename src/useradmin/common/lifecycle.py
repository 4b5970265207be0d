"""Transactional template shared by mutating service operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import UUID

from sqlalchemy.orm import Session

from .errors import (
    AuthorizationDenied,
    NotificationFailure,
    PersistenceFailure,
    ResourceNotFound,
    ValidationFailed,
)
from .logging import log_context
from .outcomes import Denied, Failure, FailureReason, Invalid, Outcome, Success

logger = logging.getLogger(__name__)


class TransactionRunner:
    """Run a mutation as one unit of work and report a uniform outcome.

    The mutation runs inside the session's transaction and is committed only
    if it returns normally. ``after_commit`` runs once the commit is durable;
    its failure is logged and reported but never undoes the commit.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def run[T](
        self,
        mutation: Callable[[], T],
        *,
        operation: str,
        success_message: str,
        failure_message: str,
        actor_id: UUID | None = None,
        target_id: UUID | None = None,
        after_commit: Callable[[T], None] | None = None,
        after_commit_failure_message: str | None = None,
        redirect_to: str | None = None,
    ) -> Success[T] | Invalid | Failure[T]:
        context = log_context(actor_id=actor_id, target_id=target_id, operation=operation)

        try:
            value = mutation()
            self._session.commit()
        except ValidationFailed as exc:
            self._session.rollback()
            logger.info(
                f"{operation}.invalid",
                extra={**context, "fields": sorted({e.field for e in exc.errors})},
            )
            return Invalid(errors=exc.errors, message=exc.message)
        except ResourceNotFound as exc:
            self._session.rollback()
            logger.info(f"{operation}.not_found", extra=context)
            return Failure(message=exc.message, reason=FailureReason.NOT_FOUND)
        except Exception as exc:
            self._session.rollback()
            logger.error(
                f"{operation}.failed",
                extra={**context, "error_type": type(exc).__name__, "error": str(exc)},
                exc_info=exc,
            )
            return Failure(message=failure_message, reason=FailureReason.PERSISTENCE)
        except BaseException:
            # Cancellation before commit leaves nothing behind.
            self._session.rollback()
            raise

        if after_commit is not None:
            try:
                after_commit(value)
            except Exception as exc:
                logger.error(
                    f"{operation}.after_commit.failed",
                    extra={**context, "error_type": type(exc).__name__, "error": str(exc)},
                    exc_info=exc,
                )
                return Failure(
                    message=after_commit_failure_message or failure_message,
                    reason=FailureReason.NOTIFICATION,
                    value=value,
                )

        logger.info(f"{operation}.success", extra=context)
        return Success(value=value, message=success_message, redirect_to=redirect_to)


def unwrap[T](outcome: Outcome[T]) -> T:
    """Return the value of a :class:`Success` or raise the matching error."""

    match outcome:
        case Success(value=value):
            return value
        case Denied(message=message):
            raise AuthorizationDenied(message)
        case Invalid(errors=errors, message=message):
            raise ValidationFailed(errors, message)
        case Failure(message=message, reason=FailureReason.NOT_FOUND):
            raise ResourceNotFound(message)
        case Failure(message=message, reason=FailureReason.NOTIFICATION, value=value):
            raise NotificationFailure(message, value=value)
        case Failure(message=message):
            raise PersistenceFailure(message)
    raise TypeError(f"Unsupported outcome: {outcome!r}")


__all__ = ["TransactionRunner", "unwrap"]
