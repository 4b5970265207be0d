"""Problem Details helpers for consistent API error responses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from fastapi import status
from pydantic import Field

from .schema import BaseSchema


@dataclass(frozen=True)
class ErrorDefinition:
    """Canonical Problem Details error metadata."""

    type: str
    title: str
    status: int


ERROR_DEFINITIONS: dict[str, ErrorDefinition] = {
    "bad_request": ErrorDefinition(
        type="bad_request",
        title="Bad request",
        status=status.HTTP_400_BAD_REQUEST,
    ),
    "unauthorized": ErrorDefinition(
        type="unauthorized",
        title="Unauthorized",
        status=status.HTTP_401_UNAUTHORIZED,
    ),
    "forbidden": ErrorDefinition(
        type="forbidden",
        title="Forbidden",
        status=status.HTTP_403_FORBIDDEN,
    ),
    "not_found": ErrorDefinition(
        type="not_found",
        title="Not found",
        status=status.HTTP_404_NOT_FOUND,
    ),
    "method_not_allowed": ErrorDefinition(
        type="method_not_allowed",
        title="Method not allowed",
        status=status.HTTP_405_METHOD_NOT_ALLOWED,
    ),
    "conflict": ErrorDefinition(
        type="conflict",
        title="Conflict",
        status=status.HTTP_409_CONFLICT,
    ),
    "validation_error": ErrorDefinition(
        type="validation_error",
        title="Validation error",
        status=422,
    ),
    "service_unavailable": ErrorDefinition(
        type="service_unavailable",
        title="Service unavailable",
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    ),
    "internal_error": ErrorDefinition(
        type="internal_error",
        title="Internal server error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
}

STATUS_TO_ERROR_TYPE: dict[int, ErrorDefinition] = {
    definition.status: definition for definition in ERROR_DEFINITIONS.values()
}


class ProblemDetailsErrorItem(BaseSchema):
    """Structured error detail used for validation-style responses."""

    path: str | None = None
    message: str
    code: str | None = None


class ProblemDetails(BaseSchema):
    """Problem Details-style response payload."""

    type: str
    title: str
    status: int
    detail: str | dict[str, Any] | None = None
    instance: str
    request_id: str | None = Field(default=None, alias="requestId")
    errors: list[ProblemDetailsErrorItem] | None = None


class ApiError(RuntimeError):
    """Custom exception carrying Problem Details metadata."""

    def __init__(
        self,
        *,
        error_type: str,
        status_code: int,
        detail: str | dict[str, Any] | None = None,
        title: str | None = None,
        errors: list[ProblemDetailsErrorItem] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        message = detail if isinstance(detail, str) and detail else title or error_type
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code
        self.detail = detail
        self.title = title
        self.errors = errors
        self.headers = headers


def resolve_error_definition(status_code: int) -> ErrorDefinition:
    """Return the canonical error definition for ``status_code``."""

    return STATUS_TO_ERROR_TYPE.get(
        status_code,
        ErrorDefinition(type="error", title="Error", status=status_code),
    )


def format_error_path(loc: Iterable[Any] | None) -> str | None:
    """Convert a Pydantic-style loc tuple/list into a dotted path."""

    if not loc:
        return None
    parts: list[str] = []
    for entry in loc:
        if entry in {"body", "query", "path", "header", "cookie"}:
            continue
        if isinstance(entry, int):
            if not parts:
                parts.append(f"[{entry}]")
            else:
                parts[-1] = f"{parts[-1]}[{entry}]"
            continue
        parts.append(str(entry))
    if not parts:
        return None
    return ".".join(parts).replace(".[", "[")


def error_items_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[ProblemDetailsErrorItem]:
    """Convert Pydantic error dicts into Problem Details error items."""

    items: list[ProblemDetailsErrorItem] = []
    for entry in errors:
        loc = entry.get("loc") or entry.get("path")
        message = entry.get("msg") or entry.get("message") or "Invalid value"
        code = entry.get("type") or entry.get("code")
        path_value: str | None
        if isinstance(loc, (list, tuple)):
            path_value = format_error_path(loc)
        elif isinstance(loc, str):
            path_value = loc
        else:
            path_value = None
        items.append(
            ProblemDetailsErrorItem(
                path=path_value,
                message=str(message),
                code=str(code) if code else None,
            )
        )
    return items


def coerce_detail(detail: Any) -> tuple[str | None, list[ProblemDetailsErrorItem] | None]:
    """Normalize an ``HTTPException.detail`` payload into text plus error items."""

    if detail is None:
        return None, None
    if isinstance(detail, ProblemDetails):
        text = detail.detail if isinstance(detail.detail, str) else None
        return text, detail.errors
    if isinstance(detail, list):
        return None, error_items_from_pydantic(detail)
    if isinstance(detail, dict):
        message = detail.get("detail") or detail.get("message")
        errors = detail.get("errors")
        items = error_items_from_pydantic(errors) if isinstance(errors, list) else None
        return (str(message) if message else None), items
    return str(detail), None


def build_problem_details(
    *,
    status_code: int,
    instance: str,
    request_id: str | None,
    detail: str | dict[str, Any] | None = None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    title: str | None = None,
) -> ProblemDetails:
    """Construct a Problem Details payload."""

    definition = resolve_error_definition(status_code)
    return ProblemDetails(
        type=error_type or definition.type,
        title=title or definition.title,
        status=status_code,
        detail=detail,
        instance=instance,
        request_id=request_id,
        errors=errors,
    )


__all__ = [
    "ApiError",
    "ERROR_DEFINITIONS",
    "ProblemDetails",
    "ProblemDetailsErrorItem",
    "build_problem_details",
    "coerce_detail",
    "error_items_from_pydantic",
    "format_error_path",
    "resolve_error_definition",
]
