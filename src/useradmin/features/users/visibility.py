"""Ownership-scoped visibility of user records.

The top role sees every record. Everyone else sees the records they created
plus their own. The same rule is available as an in-memory predicate and as a
SQL ``WHERE`` clause, so listings filter before they sort and paginate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import false, or_
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from useradmin.core.auth.principal import Principal
from useradmin.core.rbac.policy import OwnedRecord, is_top_role
from useradmin.models import User


@dataclass(frozen=True, slots=True)
class VisibilityFilter:
    principal_id: UUID | None
    unrestricted: bool = False

    def matches(self, record: OwnedRecord) -> bool:
        if self.unrestricted:
            return True
        if self.principal_id is None:
            return False
        return record.created_by_id == self.principal_id or record.id == self.principal_id

    def clause(self) -> ColumnElement[bool] | None:
        """SQL equivalent of :meth:`matches`; ``None`` means no restriction."""
        if self.unrestricted:
            return None
        if self.principal_id is None:
            return false()
        return or_(User.created_by_id == self.principal_id, User.id == self.principal_id)

    def apply(self, stmt: Select[Any]) -> Select[Any]:
        clause = self.clause()
        return stmt if clause is None else stmt.where(clause)


def visible_users(principal: Principal | None) -> VisibilityFilter:
    if principal is None:
        return VisibilityFilter(principal_id=None)
    return VisibilityFilter(principal_id=principal.id, unrestricted=is_top_role(principal))


__all__ = ["VisibilityFilter", "visible_users"]
