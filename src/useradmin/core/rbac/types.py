"""RBAC type definitions used across the stack."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    """Closed set of roles a user may hold."""

    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    USER = "user"


class Permission(str, enum.Enum):
    """Closed set of permissions, grouped by the resource they guard."""

    CREATE_USER = "create-user"
    READ_USER = "read-user"
    UPDATE_USER = "update-user"
    DELETE_USER = "delete-user"


@dataclass(frozen=True)
class PermissionDef:
    """Static permission definition."""

    key: Permission
    resource: str
    action: str
    label: str
    description: str


@dataclass(frozen=True)
class RoleDef:
    """Static role definition and the permissions it grants."""

    key: Role
    label: str
    description: str
    permissions: tuple[Permission, ...]


__all__ = ["Permission", "PermissionDef", "Role", "RoleDef"]
