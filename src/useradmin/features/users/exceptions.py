"""Errors and user-facing messages for user lifecycle operations."""

from __future__ import annotations

from uuid import UUID

from useradmin.common.errors import ResourceNotFound

USERS_ROUTE = "/users"

USER_CREATED = "User created"
USER_UPDATED = "User updated"
USER_DELETED = "User deleted"
CREATE_FAILED = "Failed to create user"
UPDATE_FAILED = "Failed to update user"
DELETE_FAILED = "Failed to delete user"
LIST_FAILED = "Failed to load users"
NOTIFICATION_FAILED = "User created, but the credential email could not be sent"
EMAIL_TAKEN = "The email has already been taken."


class UserNotFoundError(ResourceNotFound):
    def __init__(self, user_id: UUID) -> None:
        super().__init__("User not found")
        self.user_id = user_id


__all__ = [
    "CREATE_FAILED",
    "DELETE_FAILED",
    "EMAIL_TAKEN",
    "LIST_FAILED",
    "NOTIFICATION_FAILED",
    "UPDATE_FAILED",
    "USERS_ROUTE",
    "USER_CREATED",
    "USER_DELETED",
    "USER_UPDATED",
    "UserNotFoundError",
]
