"""Database primitives: declarative base, column types, engine and sessions."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, UUIDPrimaryKeyMixin, metadata
from .engine import build_engine
from .session import (
    create_schema,
    get_db_read,
    get_db_write,
    get_engine_from_app,
    get_session_factory_from_app,
    init_db,
    session_scope,
    shutdown_db,
)
from .types import UTCDateTime, UUIDType

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDPrimaryKeyMixin",
    "UUIDType",
    "build_engine",
    "create_schema",
    "get_db_read",
    "get_db_write",
    "get_engine_from_app",
    "get_session_factory_from_app",
    "init_db",
    "metadata",
    "session_scope",
    "shutdown_db",
]
