"""Translate ``sort`` tokens such as ``-created_at`` into ORDER BY clauses."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.sql.elements import ColumnElement

type SortAllowedMap = Mapping[str, tuple[ColumnElement[Any], ColumnElement[Any]]]


class SortError(ValueError):
    """Raised when a sort token names an unsupported field."""


def parse_sort(raw: str | None) -> list[str]:
    """Split a comma-separated ``sort`` value into tokens, dropping duplicates."""

    if not raw:
        return []
    seen: set[str] = set()
    tokens: list[str] = []
    for part in raw.split(","):
        token = part.strip()
        if token and token not in seen:
            seen.add(token)
            tokens.append(token)
    return tokens


def resolve_sort(
    tokens: Sequence[str],
    *,
    allowed: SortAllowedMap,
    default: Sequence[str],
    id_field: tuple[ColumnElement[Any], ColumnElement[Any]],
) -> list[ColumnElement[Any]]:
    """Resolve sort tokens into ``(asc, desc)`` columns from ``allowed``.

    The id column is appended as a tie-breaker, following the direction of the
    first token, so pages stay stable across requests.
    """

    materialized = list(tokens) or list(default)
    order: list[ColumnElement[Any]] = []
    first_desc: bool | None = None
    for token in materialized:
        descending = token.startswith("-")
        name = token[1:] if descending else token
        columns = allowed.get(name)
        if columns is None:
            allowed_list = ", ".join(sorted(allowed))
            raise SortError(f"Unsupported sort field '{name}'. Allowed: {allowed_list}")
        order.append(columns[1] if descending else columns[0])
        if first_desc is None:
            first_desc = descending

    order.append(id_field[1] if first_desc else id_field[0])
    return order


__all__ = ["SortAllowedMap", "SortError", "parse_sort", "resolve_sort"]
