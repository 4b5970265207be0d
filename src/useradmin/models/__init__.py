"""ORM models."""

from .user import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, User, UserRole, canonical_email

__all__ = ["EMAIL_MAX_LENGTH", "NAME_MAX_LENGTH", "User", "UserRole", "canonical_email"]
