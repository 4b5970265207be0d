"""Helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import typer
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from useradmin.common.logging import setup_logging
from useradmin.core.auth.principal import Principal
from useradmin.db import build_engine, session_scope
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.features.users.repository import UsersRepository
from useradmin.settings import Settings, get_settings


def load_settings() -> Settings:
    settings = get_settings()
    setup_logging(settings)
    return settings


@contextmanager
def open_engine(settings: Settings) -> Iterator[Engine]:
    engine = build_engine(settings)
    try:
        yield engine
    finally:
        engine.dispose()


@contextmanager
def open_session(settings: Settings) -> Iterator[Session]:
    with open_engine(settings) as engine, session_scope(engine) as session:
        yield session


def resolve_principal(session: Session, email: str) -> Principal:
    """Load the acting user by email or exit with an error."""

    user = UsersRepository(session).get_by_email(email)
    if user is None:
        fail(f"no user with email '{email}'")
    return Principal(id=user.id, roles=RoleAssignmentStore(session).roles_for(user.id))


def fail(message: str, *, code: int = 1) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=code)


__all__ = ["fail", "load_settings", "open_engine", "open_session", "resolve_principal"]
