from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from useradmin.common.errors import (
    AuthorizationDenied,
    NotificationFailure,
    PersistenceFailure,
    ResourceNotFound,
    ValidationFailed,
)
from useradmin.common.lifecycle import TransactionRunner, unwrap
from useradmin.common.outcomes import (
    Denied,
    Failure,
    FailureReason,
    FieldError,
    Invalid,
    Success,
)


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(name="session")


def _run(runner: TransactionRunner, mutation, **kwargs):
    kwargs.setdefault("operation", "things.create")
    kwargs.setdefault("success_message", "Thing created")
    kwargs.setdefault("failure_message", "Failed to create thing")
    return runner.run(mutation, **kwargs)


def test_success_commits_once(session: MagicMock) -> None:
    outcome = _run(TransactionRunner(session), lambda: 42, redirect_to="/things")

    assert outcome == Success(value=42, message="Thing created", redirect_to="/things")
    session.commit.assert_called_once_with()
    session.rollback.assert_not_called()


def test_validation_failure_rolls_back(session: MagicMock) -> None:
    def mutation() -> None:
        raise ValidationFailed.for_field("email", "Taken", code="unique")

    outcome = _run(TransactionRunner(session), mutation)

    assert isinstance(outcome, Invalid)
    assert outcome.fields() == {"email"}
    assert outcome.message == "The given data was invalid."
    session.commit.assert_not_called()
    session.rollback.assert_called_once_with()


def test_missing_resource_is_reported_as_not_found(session: MagicMock) -> None:
    def mutation() -> None:
        raise ResourceNotFound("Thing not found")

    outcome = _run(TransactionRunner(session), mutation)

    assert outcome == Failure(message="Thing not found", reason=FailureReason.NOT_FOUND)
    session.rollback.assert_called_once_with()


def test_commit_error_becomes_generic_failure(session: MagicMock, caplog) -> None:
    session.commit.side_effect = RuntimeError("disk I/O error")

    with caplog.at_level("ERROR", logger="useradmin.common.lifecycle"):
        outcome = _run(TransactionRunner(session), lambda: 1)

    assert outcome == Failure(message="Failed to create thing", reason=FailureReason.PERSISTENCE)
    session.rollback.assert_called_once_with()
    assert "things.create.failed" in caplog.messages
    assert "disk I/O error" not in outcome.message


def test_after_commit_runs_only_after_commit(session: MagicMock) -> None:
    calls: list[str] = []
    session.commit.side_effect = lambda: calls.append("commit")

    outcome = _run(
        TransactionRunner(session),
        lambda: "value",
        after_commit=lambda value: calls.append(f"notify:{value}"),
    )

    assert isinstance(outcome, Success)
    assert calls == ["commit", "notify:value"]


def test_after_commit_is_skipped_when_the_mutation_fails(session: MagicMock) -> None:
    notified: list[object] = []

    def mutation() -> None:
        raise ValidationFailed([FieldError("name", "Required")])

    _run(TransactionRunner(session), mutation, after_commit=notified.append)

    assert notified == []


def test_after_commit_failure_keeps_the_committed_value(session: MagicMock) -> None:
    def explode(_: object) -> None:
        raise ConnectionError("relay down")

    outcome = _run(
        TransactionRunner(session),
        lambda: "created",
        after_commit=explode,
        after_commit_failure_message="Created, but the mail bounced",
    )

    assert outcome == Failure(
        message="Created, but the mail bounced",
        reason=FailureReason.NOTIFICATION,
        value="created",
    )
    session.commit.assert_called_once_with()
    session.rollback.assert_not_called()


def test_cancellation_rolls_back_and_propagates(session: MagicMock) -> None:
    def mutation() -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        _run(TransactionRunner(session), mutation)

    session.rollback.assert_called_once_with()


def test_unwrap_returns_success_value() -> None:
    assert unwrap(Success(value="ok")) == "ok"


@pytest.mark.parametrize(
    ("outcome", "error_type"),
    [
        (Denied(), AuthorizationDenied),
        (Invalid(errors=(FieldError("email", "Taken"),)), ValidationFailed),
        (Failure(message="gone", reason=FailureReason.NOT_FOUND), ResourceNotFound),
        (Failure(message="boom"), PersistenceFailure),
    ],
)
def test_unwrap_raises_matching_error(outcome, error_type) -> None:
    with pytest.raises(error_type):
        unwrap(outcome)


def test_unwrap_notification_failure_carries_value() -> None:
    with pytest.raises(NotificationFailure) as excinfo:
        unwrap(Failure(message="mail", reason=FailureReason.NOTIFICATION, value="user"))

    assert excinfo.value.value == "user"
