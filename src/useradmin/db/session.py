"""Session lifecycle and FastAPI dependencies."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from starlette.requests import HTTPConnection

from useradmin.common.problem_details import ApiError
from useradmin.settings import Settings, get_settings

from .base import metadata
from .engine import build_engine

logger = logging.getLogger(__name__)


# --- App lifecycle ----------------------------------------------------------


def init_db(app: FastAPI, settings: Settings | None = None, *, engine: Engine | None = None) -> None:
    settings = settings or get_settings()

    engine = engine or build_engine(settings)
    existing_engine = getattr(app.state, "db_engine", None)
    if existing_engine is not None and existing_engine is not engine:
        existing_engine.dispose()

    app.state.db_engine = engine
    app.state.db_sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)


def shutdown_db(app: FastAPI) -> None:
    engine = getattr(app.state, "db_engine", None)
    if engine is not None:
        engine.dispose()
    app.state.db_engine = None
    app.state.db_sessionmaker = None


def create_schema(engine: Engine) -> None:
    """Create every table known to the model metadata, skipping existing ones."""

    # Importing the models registers their tables on ``metadata``.
    import useradmin.models  # noqa: F401

    metadata.create_all(engine)
    logger.info("db.schema.created", extra={"tables": sorted(metadata.tables)})


def get_engine_from_app(app: FastAPI) -> Engine:
    engine = getattr(app.state, "db_engine", None)
    if engine is None:
        raise RuntimeError("Database not initialized. Call init_db(app, ...) at startup.")
    return engine


def get_session_factory_from_app(app: FastAPI) -> sessionmaker[Session]:
    session_factory = getattr(app.state, "db_sessionmaker", None)
    if session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db(app, ...) at startup.")
    return session_factory


def get_session_factory(conn: HTTPConnection) -> sessionmaker[Session]:
    return get_session_factory_from_app(conn.app)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Yield a session outside of a request, e.g. from the CLI."""

    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


# --- Dependencies -----------------------------------------------------------


def _log_unexpected_db_exception(request: Request, exc: BaseException) -> None:
    expected = isinstance(exc, (HTTPException, RequestValidationError))
    if not expected and isinstance(exc, ApiError):
        expected = True
    if expected:
        return
    logger.warning(
        "db.session.rollback",
        extra={
            "path": str(request.url.path),
            "method": request.method,
        },
        exc_info=exc,
    )


def _get_session(request: Request) -> Generator[Session]:
    session = get_session_factory(request)()
    try:
        yield session
        if getattr(request.state, "db_force_write", False):
            session.commit()
        else:
            session.rollback()
    except BaseException as exc:
        session.rollback()
        _log_unexpected_db_exception(request, exc)
        raise
    finally:
        session.close()


def get_db_write(
    request: Request,
    session: Annotated[Session, Depends(_get_session)],
) -> Session:
    request.state.db_force_write = True
    return session


def get_db_read(
    _request: Request,
    session: Annotated[Session, Depends(_get_session)],
) -> Session:
    return session


__all__ = [
    "create_schema",
    "get_db_read",
    "get_db_write",
    "get_engine_from_app",
    "get_session_factory",
    "get_session_factory_from_app",
    "init_db",
    "session_scope",
    "shutdown_db",
]
