from __future__ import annotations

from sqlalchemy import func

from useradmin.models import User

SORT_FIELDS = {
    "name": (func.lower(User.name).asc(), func.lower(User.name).desc()),
    "email": (User.email_normalized.asc(), User.email_normalized.desc()),
    "created_at": (User.created_at.asc(), User.created_at.desc()),
    "updated_at": (User.updated_at.asc(), User.updated_at.desc()),
}

# Newest first, like the original listing.
DEFAULT_SORT = ["-created_at"]
ID_FIELD = (User.id.asc(), User.id.desc())

__all__ = ["DEFAULT_SORT", "ID_FIELD", "SORT_FIELDS"]
