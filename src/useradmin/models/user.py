"""User accounts and their role assignments."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from useradmin.db import Base, TimestampMixin, UUIDPrimaryKeyMixin, UUIDType

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255


def canonical_email(value: str) -> str:
    return value.strip().lower()


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A managed user account."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False)
    email_normalized: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), nullable=False, unique=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by_id: Mapped[UUID | None] = mapped_column(
        UUIDType(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    role_assignments: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (Index("ix_users_created_by_id", "created_by_id"),)

    @validates("email")
    def _store_normalised_email(self, _key: str, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Email must not be empty")
        self.email_normalized = canonical_email(cleaned)
        return cleaned

    def __repr__(self) -> str:
        return f"User(id={self.id!s}, email={self.email!r})"


class UserRole(Base):
    """Assignment of one closed-vocabulary role key to a user."""

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(
        UUIDType(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role: Mapped[str] = mapped_column(String(50), primary_key=True)

    user: Mapped[User] = relationship("User", back_populates="role_assignments")


__all__ = ["EMAIL_MAX_LENGTH", "NAME_MAX_LENGTH", "User", "UserRole", "canonical_email"]
