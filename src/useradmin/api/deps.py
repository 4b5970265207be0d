"""Service factories used by API routers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from useradmin.db import get_db_read, get_db_write
from useradmin.features.notifications import CredentialNotifier, build_notifier
from useradmin.settings import Settings, get_settings

if TYPE_CHECKING:
    from useradmin.features.users.service import UsersService

WriteSessionDep = Annotated[Session, Depends(get_db_write)]
ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_credential_notifier(request: Request, settings: SettingsDep) -> CredentialNotifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = build_notifier(settings)
        request.app.state.notifier = notifier
    return notifier


NotifierDep = Annotated[CredentialNotifier, Depends(get_credential_notifier)]


def get_users_service(
    session: WriteSessionDep,
    settings: SettingsDep,
    notifier: NotifierDep,
) -> UsersService:
    from useradmin.features.users.service import UsersService

    return UsersService(session=session, settings=settings, notifier=notifier)


def get_users_service_read(
    session: ReadSessionDep,
    settings: SettingsDep,
    notifier: NotifierDep,
) -> UsersService:
    from useradmin.features.users.service import UsersService

    return UsersService(session=session, settings=settings, notifier=notifier)


__all__ = [
    "NotifierDep",
    "ReadSessionDep",
    "SettingsDep",
    "WriteSessionDep",
    "get_credential_notifier",
    "get_users_service",
    "get_users_service_read",
]
