"""Pydantic schemas for user payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field, field_validator

from useradmin.common.pagination import Page
from useradmin.common.schema import BaseSchema
from useradmin.models import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH


class UserInput(BaseSchema):
    """Validated name/email pair written to a user record."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _limit_email_length(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if len(value) > EMAIL_MAX_LENGTH:
                msg = f"Email must not be longer than {EMAIL_MAX_LENGTH} characters."
                raise ValueError(msg)
        return value


class UserOut(BaseSchema):
    """Public fields of a user record."""

    id: UUID
    name: str
    email: str
    created_by_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


UserPage = Page[UserOut]


class UserMutationResponse(BaseSchema):
    message: str
    redirect_to: str | None = None
    user: UserOut


class UserDeleteResponse(BaseSchema):
    message: str
    redirect_to: str | None = None


__all__ = [
    "UserDeleteResponse",
    "UserInput",
    "UserMutationResponse",
    "UserOut",
    "UserPage",
]
