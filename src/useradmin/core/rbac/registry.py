"""Canonical permission and role registry.

The catalog is compiled in. Lookups are total over the enumerations and raise
:class:`UnknownKeyError` for anything else, so keys arriving from the database
or the command line can be checked before they are trusted.
"""

from __future__ import annotations

from collections.abc import Iterable

from useradmin.core.rbac.types import Permission, PermissionDef, Role, RoleDef


class UnknownKeyError(KeyError, ValueError):
    """Raised when a role or permission key is outside the closed catalog."""

    def __init__(self, key: object) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown role or permission key: {self.key!r}"


def _permission(*, key: Permission, label: str, description: str) -> PermissionDef:
    action, _, resource = key.value.partition("-")
    return PermissionDef(
        key=key,
        resource=resource,
        action=action,
        label=label,
        description=description,
    )


PERMISSIONS: tuple[PermissionDef, ...] = (
    _permission(
        key=Permission.CREATE_USER,
        label="Create User",
        description="Provision a new user account.",
    ),
    _permission(
        key=Permission.READ_USER,
        label="Read User",
        description="List and inspect user accounts within the caller's visibility.",
    ),
    _permission(
        key=Permission.UPDATE_USER,
        label="Update User",
        description="Change the name or email of a user account.",
    ),
    _permission(
        key=Permission.DELETE_USER,
        label="Delete User",
        description="Permanently remove a user account.",
    ),
)

PERMISSION_BY_KEY: dict[str, PermissionDef] = {
    definition.key.value: definition for definition in PERMISSIONS
}

_ALL_USER_PERMISSIONS: tuple[Permission, ...] = tuple(d.key for d in PERMISSIONS)

ROLES: tuple[RoleDef, ...] = (
    RoleDef(
        key=Role.SUPER_ADMIN,
        label="Super Admin",
        description="Full access to every user account.",
        permissions=_ALL_USER_PERMISSIONS,
    ),
    RoleDef(
        key=Role.ADMIN,
        label="Admin",
        description="Manages the user accounts they created.",
        permissions=_ALL_USER_PERMISSIONS,
    ),
    RoleDef(
        key=Role.USER,
        label="User",
        description="Base role assigned to every newly created account.",
        permissions=(),
    ),
)

ROLE_BY_KEY: dict[str, RoleDef] = {definition.key.value: definition for definition in ROLES}

TOP_ROLE = Role.SUPER_ADMIN
DEFAULT_ROLE = Role.USER


def parse_role(key: str | Role) -> Role:
    """Return the :class:`Role` for ``key`` or raise :class:`UnknownKeyError`."""
    if isinstance(key, Role):
        return key
    definition = ROLE_BY_KEY.get(key) if isinstance(key, str) else None
    if definition is None:
        raise UnknownKeyError(key)
    return definition.key


def parse_permission(key: str | Permission) -> Permission:
    """Return the :class:`Permission` for ``key`` or raise :class:`UnknownKeyError`."""
    if isinstance(key, Permission):
        return key
    definition = PERMISSION_BY_KEY.get(key) if isinstance(key, str) else None
    if definition is None:
        raise UnknownKeyError(key)
    return definition.key


def label_of(key: str | Role | Permission) -> str:
    """Display label for any role or permission key."""
    if isinstance(key, Role):
        return ROLE_BY_KEY[key.value].label
    if isinstance(key, Permission):
        return PERMISSION_BY_KEY[key.value].label
    if isinstance(key, str):
        if key in ROLE_BY_KEY:
            return ROLE_BY_KEY[key].label
        if key in PERMISSION_BY_KEY:
            return PERMISSION_BY_KEY[key].label
    raise UnknownKeyError(key)


def permissions_for_roles(roles: Iterable[str | Role]) -> frozenset[Permission]:
    granted: set[Permission] = set()
    for role in roles:
        granted.update(ROLE_BY_KEY[parse_role(role).value].permissions)
    return frozenset(granted)


__all__ = [
    "DEFAULT_ROLE",
    "PERMISSIONS",
    "PERMISSION_BY_KEY",
    "ROLES",
    "ROLE_BY_KEY",
    "TOP_ROLE",
    "UnknownKeyError",
    "label_of",
    "parse_permission",
    "parse_role",
    "permissions_for_roles",
]
