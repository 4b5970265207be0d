"""Engine construction for SQLite and PostgreSQL URLs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool

from useradmin.settings import Settings

logger = logging.getLogger(__name__)


def is_sqlite_memory_url(url: URL) -> bool:
    database = (url.database or "").strip()
    return database in {"", ":memory:"} or database.startswith("file::memory:")


def ensure_sqlite_database_directory(url: URL) -> None:
    database = (url.database or "").strip()
    if not database or is_sqlite_memory_url(url):
        return
    Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # SQLite ignores ON DELETE clauses unless foreign keys are switched on per connection.
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def build_engine(settings: Settings) -> Engine:
    """Create a sync engine for ``settings.database_url``."""

    url = make_url(settings.database_url)
    engine_kwargs: dict[str, Any] = {"echo": settings.database_echo, "future": True}

    if url.get_backend_name() == "sqlite":
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if is_sqlite_memory_url(url):
            engine_kwargs["poolclass"] = StaticPool
        else:
            ensure_sqlite_database_directory(url)
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **engine_kwargs)
    if url.get_backend_name() == "sqlite":
        _enable_sqlite_foreign_keys(engine)

    logger.debug(
        "db.engine.created",
        extra={"backend": url.get_backend_name(), "database": url.database},
    )
    return engine


__all__ = ["build_engine", "ensure_sqlite_database_directory", "is_sqlite_memory_url"]
