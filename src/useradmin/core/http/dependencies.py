"""FastAPI dependencies that bridge HTTP requests to principals."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from useradmin.core.auth.principal import Principal
from useradmin.db import get_db_read
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.models import User
from useradmin.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_current_principal(
    request: Request,
    session: ReadSessionDep,
    settings: SettingsDep,
) -> Principal | None:
    """Resolve the acting principal from the trusted user-id header.

    The header is set by the session layer in front of this service. Missing,
    malformed or unknown ids resolve to ``None``, which every policy denies.
    """

    raw = request.headers.get(settings.auth_user_header)
    if not raw:
        return None
    try:
        user_id = UUID(raw.strip())
    except ValueError:
        logger.info("auth.principal.malformed", extra={"header": settings.auth_user_header})
        return None

    user = session.get(User, user_id)
    if user is None:
        logger.info("auth.principal.unknown", extra={"user_id": str(user_id)})
        return None

    roles = RoleAssignmentStore(session).roles_for(user.id)
    return Principal(id=user.id, roles=roles)


PrincipalDep = Annotated[Principal | None, Depends(get_current_principal)]


__all__ = ["PrincipalDep", "ReadSessionDep", "SettingsDep", "get_current_principal"]
