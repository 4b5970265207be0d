"""The acting user behind a request."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from useradmin.core.rbac.registry import parse_role, permissions_for_roles
from useradmin.core.rbac.types import Permission, Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity plus roles; permissions are derived from the roles."""

    id: UUID
    roles: frozenset[Role] = field(default_factory=frozenset)

    @classmethod
    def of(cls, id: UUID, roles: Iterable[str | Role] = ()) -> Principal:
        return cls(id=id, roles=frozenset(parse_role(role) for role in roles))

    @property
    def permissions(self) -> frozenset[Permission]:
        return permissions_for_roles(self.roles)

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions


__all__ = ["Principal"]
