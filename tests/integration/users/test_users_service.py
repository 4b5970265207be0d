"""Lifecycle behaviour of :class:`UsersService` against a real database."""

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from useradmin.common.outcomes import Denied, Failure, FailureReason, Invalid, Success
from useradmin.core.rbac.types import Role
from useradmin.core.security.hashing import verify_password
from useradmin.features.notifications import NotificationError
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.features.users.repository import UsersRepository
from useradmin.features.users.service import UsersService
from useradmin.features.users.visibility import visible_users
from useradmin.models import User
from useradmin.settings import Settings
from tests.utils import RecordingNotifier


def _count(session_factory: sessionmaker[Session]) -> int:
    with session_factory() as session:
        return UsersRepository(session).count()


def _load(session_factory: sessionmaker[Session], user_id) -> User | None:
    with session_factory() as session:
        return session.get(User, user_id)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_user_assigns_owner_role_and_sends_credentials(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
) -> None:
    admin = seed_identity.admin_a

    outcome = users_service.create_user(
        principal=admin.principal,
        payload={"name": "Ann", "email": "ann@example.com"},
    )

    assert isinstance(outcome, Success)
    assert outcome.message == "User created"
    assert outcome.redirect_to == "/users"
    created = outcome.value
    assert created.email == "ann@example.com"
    assert created.created_by_id == admin.id

    (sent,) = notifier.sent
    assert sent.recipient == "ann@example.com"
    assert sent.name == "Ann"
    assert len(sent.password) >= 12

    with session_factory() as session:
        stored = session.get(User, created.id)
        assert stored is not None
        assert verify_password(sent.password, stored.hashed_password)
        assert sent.password not in stored.hashed_password
        assert RoleAssignmentStore(session).roles_for(created.id) == frozenset({Role.USER})


def test_create_user_denied_for_base_role(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
) -> None:
    before = _count(session_factory)

    outcome = users_service.create_user(
        principal=seed_identity.user_b.principal,
        payload={"name": "Ann", "email": "ann@example.com"},
    )

    assert outcome == Denied()
    assert _count(session_factory) == before
    assert notifier.sent == []


def test_create_user_denied_without_principal(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    before = _count(session_factory)

    outcome = users_service.create_user(principal=None, payload={"name": "A", "email": "a@b.co"})

    assert isinstance(outcome, Denied)
    assert _count(session_factory) == before


def test_authorization_is_checked_before_validation(
    users_service: UsersService,
    seed_identity,
) -> None:
    outcome = users_service.create_user(
        principal=seed_identity.user_b.principal,
        payload={"name": "", "email": "not-an-email"},
    )

    assert isinstance(outcome, Denied)


@pytest.mark.parametrize(
    ("payload", "fields"),
    [
        ({"email": "ann@example.com"}, {"name"}),
        ({"name": "   ", "email": "ann@example.com"}, {"name"}),
        ({"name": "Ann", "email": "not-an-email"}, {"email"}),
        ({"name": "A" * 256, "email": "ann@example.com"}, {"name"}),
        ({"name": "Ann", "email": f"{'a' * 250}@example.com"}, {"email"}),
        ({}, {"name", "email"}),
    ],
)
def test_create_user_rejects_invalid_input(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
    payload: dict[str, str],
    fields: set[str],
) -> None:
    before = _count(session_factory)

    outcome = users_service.create_user(principal=seed_identity.admin_a.principal, payload=payload)

    assert isinstance(outcome, Invalid)
    assert outcome.fields() == fields
    assert _count(session_factory) == before
    assert notifier.sent == []


def test_create_user_rejects_taken_email_case_insensitively(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
) -> None:
    before = _count(session_factory)

    outcome = users_service.create_user(
        principal=seed_identity.super_admin.principal,
        payload={"name": "Another Alice", "email": "  ALICE@example.com "},
    )

    assert isinstance(outcome, Invalid)
    (error,) = outcome.errors
    assert error.field == "email"
    assert error.code == "unique"
    assert error.message == "The email has already been taken."
    assert _count(session_factory) == before
    assert notifier.sent == []


def test_notification_failure_keeps_the_created_user(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
) -> None:
    notifier.fail_with = NotificationError("relay down")

    outcome = users_service.create_user(
        principal=seed_identity.admin_a.principal,
        payload={"name": "Ann", "email": "ann@example.com"},
    )

    assert isinstance(outcome, Failure)
    assert outcome.reason is FailureReason.NOTIFICATION
    assert outcome.message == "User created, but the credential email could not be sent"
    assert outcome.value is not None
    assert _load(session_factory, outcome.value.id) is not None


def test_persistence_failure_rolls_back_and_skips_notification(
    users_service: UsersService,
    seed_identity,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_assign(self, user_id, role):
        raise OperationalError("INSERT INTO user_roles", {}, Exception("database is locked"))

    monkeypatch.setattr(RoleAssignmentStore, "assign", broken_assign)
    before = _count(session_factory)

    outcome = users_service.create_user(
        principal=seed_identity.admin_a.principal,
        payload={"name": "Ann", "email": "ann@example.com"},
    )

    assert outcome == Failure(message="Failed to create user", reason=FailureReason.PERSISTENCE)
    assert _count(session_factory) == before
    assert notifier.sent == []


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


def test_update_user_replaces_name_and_email(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    target = seed_identity.x

    outcome = users_service.update_user(
        principal=seed_identity.admin_a.principal,
        user_id=target.id,
        payload={"name": "Xavier Renamed", "email": "xavier@example.com"},
    )

    assert isinstance(outcome, Success)
    assert outcome.message == "User updated"
    stored = _load(session_factory, target.id)
    assert stored.name == "Xavier Renamed"
    assert stored.email == "xavier@example.com"


def test_update_user_may_keep_its_own_email(
    users_service: UsersService,
    seed_identity,
) -> None:
    outcome = users_service.update_user(
        principal=seed_identity.admin_a.principal,
        user_id=seed_identity.x.id,
        payload={"name": "Xavier", "email": "X@example.com"},
    )

    assert isinstance(outcome, Success)


def test_update_user_rejects_another_users_email(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = users_service.update_user(
        principal=seed_identity.admin_a.principal,
        user_id=seed_identity.x.id,
        payload={"name": "Xavier", "email": seed_identity.y.email},
    )

    assert isinstance(outcome, Invalid)
    assert outcome.fields() == {"email"}
    stored = _load(session_factory, seed_identity.x.id)
    assert stored.email == "x@example.com"


def test_update_missing_user_is_not_found(users_service: UsersService, seed_identity) -> None:
    outcome = users_service.update_user(
        principal=seed_identity.admin_a.principal,
        user_id=uuid4(),
        payload={"name": "Nobody", "email": "nobody@example.com"},
    )

    assert outcome == Failure(message="User not found", reason=FailureReason.NOT_FOUND)


def test_update_denied_for_base_role(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = users_service.update_user(
        principal=seed_identity.user_b.principal,
        user_id=seed_identity.user_b.id,
        payload={"name": "Bobby", "email": "bob@example.com"},
    )

    assert isinstance(outcome, Denied)
    assert _load(session_factory, seed_identity.user_b.id).name == "Bob User"


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def test_delete_user_then_again_reports_not_found(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    admin = seed_identity.admin_a.principal
    target = seed_identity.y.id

    first = users_service.delete_user(principal=admin, user_id=target)
    second = users_service.delete_user(principal=admin, user_id=target)

    assert isinstance(first, Success)
    assert first.message == "User deleted"
    assert first.redirect_to == "/users"
    assert second == Failure(message="User not found", reason=FailureReason.NOT_FOUND)
    assert _load(session_factory, target) is None
    with session_factory() as session:
        assert RoleAssignmentStore(session).roles_for(target) == frozenset()


def test_deleting_a_creator_orphans_their_records(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = users_service.delete_user(
        principal=seed_identity.super_admin.principal,
        user_id=seed_identity.admin_c.id,
    )

    assert isinstance(outcome, Success)
    orphan = _load(session_factory, seed_identity.z.id)
    assert orphan is not None
    assert orphan.created_by_id is None


def test_delete_denied_leaves_record(
    users_service: UsersService,
    seed_identity,
    session_factory: sessionmaker[Session],
) -> None:
    outcome = users_service.delete_user(
        principal=seed_identity.user_b.principal,
        user_id=seed_identity.x.id,
    )

    assert isinstance(outcome, Denied)
    assert _load(session_factory, seed_identity.x.id) is not None


def test_ownership_mode_limits_mutations_to_own_records(
    db_session: Session,
    settings: Settings,
    notifier: RecordingNotifier,
    seed_identity,
) -> None:
    strict = UsersService(
        session=db_session,
        settings=settings.model_copy(update={"users_mutation_requires_ownership": True}),
        notifier=notifier,
    )
    admin = seed_identity.admin_a.principal

    foreign = strict.delete_user(principal=admin, user_id=seed_identity.z.id)
    own = strict.delete_user(principal=admin, user_id=seed_identity.x.id)

    assert isinstance(foreign, Denied)
    assert isinstance(own, Success)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def _emails(outcome) -> set[str]:
    assert isinstance(outcome, Success)
    return {user.email for user in outcome.value.items}


def test_top_role_sees_every_user(users_service: UsersService, seed_identity) -> None:
    outcome = users_service.list_users(principal=seed_identity.super_admin.principal)

    assert _emails(outcome) == {user.email for user in seed_identity.all()}
    assert outcome.value.total == 7


def test_admin_sees_own_records_and_self(users_service: UsersService, seed_identity) -> None:
    a = users_service.list_users(principal=seed_identity.admin_a.principal)
    c = users_service.list_users(principal=seed_identity.admin_c.principal)

    assert _emails(a) == {"alice@example.com", "x@example.com", "y@example.com"}
    assert a.value.total == 3
    assert _emails(c) == {"carol@example.com", "z@example.com"}
    assert c.value.total == 2


def test_base_role_cannot_list(users_service: UsersService, seed_identity) -> None:
    assert isinstance(users_service.list_users(principal=seed_identity.user_b.principal), Denied)
    assert isinstance(users_service.list_users(principal=None), Denied)


def test_list_paginates_after_filtering(users_service: UsersService, seed_identity) -> None:
    principal = seed_identity.super_admin.principal

    first = users_service.list_users(principal=principal, page=1, page_size=2, sort="name")
    last = users_service.list_users(principal=principal, page=4, page_size=2, sort="name")

    assert [u.name for u in first.value.items] == ["Alice Admin", "Bob User"]
    assert first.value.has_next is True
    assert first.value.has_previous is False
    assert [u.name for u in last.value.items] == ["Zed"]
    assert last.value.has_next is False
    assert last.value.total == 7


def test_list_sorts_descending(users_service: UsersService, seed_identity) -> None:
    outcome = users_service.list_users(
        principal=seed_identity.admin_a.principal,
        sort="-email",
    )

    assert [u.email for u in outcome.value.items] == [
        "y@example.com",
        "x@example.com",
        "alice@example.com",
    ]


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"sort": "hashed_password"}, "sort"),
        ({"page": 0}, "page"),
        ({"page_size": 0}, "page_size"),
        ({"page_size": 1000}, "page_size"),
    ],
)
def test_list_rejects_bad_query(
    users_service: UsersService,
    seed_identity,
    kwargs: dict[str, object],
    field: str,
) -> None:
    outcome = users_service.list_users(principal=seed_identity.admin_a.principal, **kwargs)

    assert isinstance(outcome, Invalid)
    assert outcome.fields() == {field}


def test_base_role_filter_only_matches_self(
    db_session: Session,
    seed_identity,
) -> None:
    stmt = visible_users(seed_identity.user_b.principal).apply(select(User))

    emails = {user.email for user in db_session.execute(stmt).scalars()}

    assert emails == {"bob@example.com"}


@pytest.mark.parametrize("payload", [None, ["x"], "Ann <ann@example.com>"])
def test_create_user_rejects_missing_or_non_object_payload(
    users_service: UsersService,
    seed_identity,
    payload,
) -> None:
    outcome = users_service.create_user(principal=seed_identity.admin_a.principal, payload=payload)

    assert isinstance(outcome, Invalid)
    assert outcome.fields() in ({"name", "email"}, {"__root__"})


def test_list_parses_string_paging_values(users_service: UsersService, seed_identity) -> None:
    outcome = users_service.list_users(
        principal=seed_identity.super_admin.principal,
        page="2",
        page_size="3",
        sort="name",
    )

    assert isinstance(outcome, Success)
    assert outcome.value.page == 2
    assert [u.name for u in outcome.value.items] == ["Root", "Xavier", "Yvonne"]


def test_list_reports_non_integer_paging_values(users_service: UsersService, seed_identity) -> None:
    outcome = users_service.list_users(
        principal=seed_identity.admin_a.principal,
        page="abc",
        page_size="1.5",
    )

    assert isinstance(outcome, Invalid)
    assert outcome.fields() == {"page", "page_size"}


def test_list_denies_before_parsing_paging_values(
    users_service: UsersService,
    seed_identity,
) -> None:
    outcome = users_service.list_users(principal=None, page="abc")

    assert isinstance(outcome, Denied)
