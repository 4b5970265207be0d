"""Offset pagination helpers shared by list endpoints."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from .schema import BaseSchema

T = TypeVar("T")


class Page(BaseSchema, Generic[T]):
    """Uniform response envelope for list endpoints."""

    items: Sequence[T]
    page: int
    page_size: int
    has_next: bool
    has_previous: bool
    total: int


def paginate_sql(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    page_size: int,
    order_by: Sequence[ColumnElement[Any]],
) -> Page[Any]:
    """Execute ``stmt`` with limit/offset pagination and a total count.

    The count runs over ``stmt`` as given, so any filtering applied beforehand
    is reflected in ``total``.
    """

    offset = (page - 1) * page_size
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = session.execute(count_stmt).scalar_one()

    rows = session.execute(
        stmt.order_by(*order_by).limit(page_size).offset(offset)
    ).scalars().all()

    return Page(
        items=list(rows),
        page=page,
        page_size=page_size,
        has_next=(page * page_size) < total,
        has_previous=page > 1,
        total=total,
    )


__all__ = ["Page", "paginate_sql"]
