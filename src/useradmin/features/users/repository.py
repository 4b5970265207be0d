"""Query helpers for working with ``User`` records."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from useradmin.models import User, canonical_email


class UsersRepository:
    """Persistence helpers for user accounts. Never commits."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email_normalized == canonical_email(email))
        return self._session.execute(stmt).scalar_one_or_none()

    def email_taken(self, email: str, *, exclude_id: UUID | None = None) -> bool:
        stmt = select(User.id).where(User.email_normalized == canonical_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self._session.execute(stmt.limit(1)).first() is not None

    def count(self) -> int:
        return self._session.execute(select(func.count()).select_from(User)).scalar_one()

    def create(
        self,
        *,
        name: str,
        email: str,
        hashed_password: str,
        created_by_id: UUID | None,
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            created_by_id=created_by_id,
        )
        self._session.add(user)
        self._session.flush()
        self._session.refresh(user)
        return user

    def update(self, user: User, *, name: str, email: str) -> User:
        user.name = name
        user.email = email
        self._session.flush()
        self._session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self._session.delete(user)
        self._session.flush()


__all__ = ["UsersRepository"]
