"""Persistence of role assignments (user id -> set of role keys)."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from useradmin.common.logging import log_context
from useradmin.core.rbac.registry import UnknownKeyError, parse_role
from useradmin.core.rbac.types import Role
from useradmin.models import UserRole

logger = logging.getLogger(__name__)


class RoleAssignmentStore:
    """Read and write ``user_roles`` rows inside the caller's transaction."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def roles_for(self, user_id: UUID) -> frozenset[Role]:
        stmt = select(UserRole.role).where(UserRole.user_id == user_id)
        roles: set[Role] = set()
        for key in self._session.execute(stmt).scalars():
            try:
                roles.add(parse_role(key))
            except UnknownKeyError:
                # Rows written by an older catalog are ignored, never trusted.
                logger.warning(
                    "rbac.role.unknown",
                    extra=log_context(user_id=user_id, role=key),
                )
        return frozenset(roles)

    def assign(self, user_id: UUID, role: str | Role) -> UserRole:
        """Grant ``role`` to ``user_id``; granting an existing role is a no-op."""

        parsed = parse_role(role)
        existing = self._session.get(UserRole, (user_id, parsed.value))
        if existing is not None:
            return existing
        assignment = UserRole(user_id=user_id, role=parsed.value)
        self._session.add(assignment)
        self._session.flush()
        logger.debug(
            "rbac.role.assigned",
            extra=log_context(user_id=user_id, role=parsed.value),
        )
        return assignment

    def revoke(self, user_id: UUID, role: str | Role) -> None:
        parsed = parse_role(role)
        self._session.execute(
            delete(UserRole).where(UserRole.user_id == user_id, UserRole.role == parsed.value)
        )

    def user_ids_with_role(self, role: str | Role) -> list[UUID]:
        parsed = parse_role(role)
        stmt = select(UserRole.user_id).where(UserRole.role == parsed.value)
        return list(self._session.execute(stmt).scalars())


__all__ = ["RoleAssignmentStore"]
