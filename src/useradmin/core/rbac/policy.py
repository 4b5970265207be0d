"""Authorization decisions for user management.

Each decision is a pure function of the principal and, where relevant, the
target record. An absent principal is always denied, and no decision raises.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from useradmin.core.auth.principal import Principal
from useradmin.core.rbac.registry import TOP_ROLE
from useradmin.core.rbac.types import Permission


class OwnedRecord(Protocol):
    """Anything with an id and an optional creator id."""

    @property
    def id(self) -> UUID: ...

    @property
    def created_by_id(self) -> UUID | None: ...


def is_top_role(principal: Principal | None) -> bool:
    return principal is not None and principal.has_role(TOP_ROLE)


def owns(principal: Principal, target: OwnedRecord) -> bool:
    """True when ``target`` is the principal itself or was created by it."""
    return target.id == principal.id or target.created_by_id == principal.id


def _holds(principal: Principal | None, permission: Permission) -> bool:
    return principal is not None and principal.has_permission(permission)


def _can_mutate(
    principal: Principal | None,
    target: OwnedRecord | None,
    permission: Permission,
    *,
    require_ownership: bool,
) -> bool:
    if not _holds(principal, permission):
        return False
    if not require_ownership or target is None or is_top_role(principal):
        return True
    return owns(principal, target)


def can_view_any_users(principal: Principal | None) -> bool:
    return _holds(principal, Permission.READ_USER)


def can_create_user(principal: Principal | None) -> bool:
    return _holds(principal, Permission.CREATE_USER)


def can_update_user(
    principal: Principal | None,
    target: OwnedRecord | None,
    *,
    require_ownership: bool = False,
) -> bool:
    """Permission check for updating ``target``.

    With ``require_ownership`` a principal below the top role is limited to
    records it created and its own record. A ``None`` target is judged on the
    permission alone so callers can authorize before looking the record up.
    """
    return _can_mutate(
        principal, target, Permission.UPDATE_USER, require_ownership=require_ownership
    )


def can_delete_user(
    principal: Principal | None,
    target: OwnedRecord | None,
    *,
    require_ownership: bool = False,
) -> bool:
    return _can_mutate(
        principal, target, Permission.DELETE_USER, require_ownership=require_ownership
    )


__all__ = [
    "OwnedRecord",
    "can_create_user",
    "can_delete_user",
    "can_update_user",
    "can_view_any_users",
    "is_top_role",
    "owns",
]
