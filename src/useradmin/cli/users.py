"""`useradmin users` commands."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from useradmin.common.errors import LifecycleError, NotificationFailure, ValidationFailed
from useradmin.common.lifecycle import unwrap
from useradmin.core.rbac.registry import ROLE_BY_KEY, TOP_ROLE, UnknownKeyError, parse_role
from useradmin.core.rbac.types import Role
from useradmin.core.security.hashing import hash_password
from useradmin.core.security.passwords import generate_password
from useradmin.features.notifications import NotificationError, build_notifier
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.features.users.repository import UsersRepository
from useradmin.features.users.schemas import UserInput, UserOut
from useradmin.features.users.service import UsersService
from useradmin.models import User

from .common import fail, load_settings, open_session, resolve_principal

app = typer.Typer(add_completion=False, no_args_is_help=True, help="User administration.")

ActingEmail = Annotated[
    str,
    typer.Option("--as", help="Email of the acting user; their permissions apply."),
]
TargetEmail = Annotated[str, typer.Option("--email", help="Email of the user to change.")]
RoleKey = Annotated[
    str,
    typer.Option("--role", help=f"Role key: {', '.join(ROLE_BY_KEY)}."),
]


def _print_user(user: UserOut) -> None:
    typer.echo(json.dumps(user.model_dump(mode="json"), indent=2))


def _describe(exc: LifecycleError) -> str:
    if isinstance(exc, ValidationFailed):
        details = "; ".join(f"{e.field}: {e.message}" for e in exc.errors)
        return f"{exc.message} ({details})"
    return exc.message


@app.command("create-super-admin", help="Bootstrap an account holding the top role.")
def create_super_admin(
    name: Annotated[str, typer.Option("--name", help="Display name.")],
    email: Annotated[str, typer.Option("--email", help="Login email.")],
    show_password: Annotated[
        bool,
        typer.Option("--show-password", help="Print the generated password."),
    ] = False,
) -> None:
    settings = load_settings()
    try:
        data = UserInput.model_validate({"name": name, "email": email})
    except ValueError as exc:
        fail(str(exc))

    password = generate_password(settings.generated_password_length)
    try:
        with open_session(settings) as session:
            repo = UsersRepository(session)
            if repo.email_taken(str(data.email)):
                fail(f"a user with email '{data.email}' already exists")
            user = repo.create(
                name=data.name,
                email=str(data.email),
                hashed_password=hash_password(password),
                created_by_id=None,
            )
            RoleAssignmentStore(session).assign(user.id, TOP_ROLE)
            created = UserOut.model_validate(user)
    except IntegrityError:
        fail(f"a user with email '{data.email}' already exists")

    try:
        build_notifier(settings).send_credentials(
            recipient=created.email, name=created.name, password=password
        )
    except NotificationError as exc:
        typer.echo(f"warning: {exc}", err=True)

    _print_user(created)
    if show_password:
        typer.echo(f"password: {password}")


@app.command("create", help="Create a user as the acting administrator.")
def create(
    acting_email: ActingEmail,
    name: Annotated[str, typer.Option("--name", help="Display name.")],
    email: Annotated[str, typer.Option("--email", help="Login email.")],
) -> None:
    settings = load_settings()
    with open_session(settings) as session:
        principal = resolve_principal(session, acting_email)
        service = UsersService(
            session=session,
            settings=settings,
            notifier=build_notifier(settings),
        )
        outcome = service.create_user(principal=principal, payload={"name": name, "email": email})
        try:
            created = unwrap(outcome)
        except NotificationFailure as exc:
            typer.echo(f"warning: {exc.message}", err=True)
            created = exc.value
        except LifecycleError as exc:
            fail(_describe(exc))
    _print_user(created)


@app.command("list", help="List the users visible to the acting user.")
def list_users(
    acting_email: ActingEmail,
    page: Annotated[int, typer.Option("--page", min=1)] = 1,
    page_size: Annotated[int | None, typer.Option("--page-size", min=1)] = None,
    sort: Annotated[str | None, typer.Option("--sort", help="e.g. name or -created_at")] = None,
) -> None:
    settings = load_settings()
    with open_session(settings) as session:
        principal = resolve_principal(session, acting_email)
        service = UsersService(
            session=session,
            settings=settings,
            notifier=build_notifier(settings),
        )
        try:
            result = unwrap(
                service.list_users(principal=principal, page=page, page_size=page_size, sort=sort)
            )
        except LifecycleError as exc:
            fail(_describe(exc))
    typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))


def _parse_role_option(value: str) -> Role:
    try:
        return parse_role(value.strip())
    except UnknownKeyError:
        fail(f"unknown role '{value}'; expected one of: {', '.join(ROLE_BY_KEY)}")


def _require_user(session: Session, email: str) -> User:
    user = UsersRepository(session).get_by_email(email)
    if user is None:
        fail(f"no user with email '{email}'")
    return user


def _print_roles(user: User, roles: frozenset[Role]) -> None:
    payload = {"id": str(user.id), "email": user.email, "roles": sorted(r.value for r in roles)}
    typer.echo(json.dumps(payload, indent=2))


@app.command("grant-role", help="Grant a role to an existing user (operator command).")
def grant_role(email: TargetEmail, role: RoleKey) -> None:
    settings = load_settings()
    parsed = _parse_role_option(role)
    with open_session(settings) as session:
        user = _require_user(session, email)
        store = RoleAssignmentStore(session)
        store.assign(user.id, parsed)
        roles = store.roles_for(user.id)
    _print_roles(user, roles)


@app.command("revoke-role", help="Revoke a role from an existing user (operator command).")
def revoke_role(email: TargetEmail, role: RoleKey) -> None:
    settings = load_settings()
    parsed = _parse_role_option(role)
    with open_session(settings) as session:
        user = _require_user(session, email)
        store = RoleAssignmentStore(session)
        if parsed is TOP_ROLE and store.user_ids_with_role(TOP_ROLE) == [user.id]:
            fail(f"'{email}' is the last {TOP_ROLE.value}; grant the role to someone else first")
        store.revoke(user.id, parsed)
        roles = store.roles_for(user.id)
    _print_roles(user, roles)


__all__ = ["app"]
