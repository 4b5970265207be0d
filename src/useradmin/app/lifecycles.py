"""FastAPI lifespan helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import Lifespan

from useradmin.db import create_schema, get_engine_from_app, init_db, shutdown_db
from useradmin.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_application_lifespan(*, settings: Settings | None = None) -> Lifespan[FastAPI]:
    """Open the database on startup and dispose of it on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved = settings or get_settings()
        owns_engine = getattr(app.state, "db_engine", None) is None
        if owns_engine:
            init_db(app, resolved)
        create_schema(get_engine_from_app(app))
        logger.info(
            "app.startup",
            extra={"version": resolved.app_version, "mail_backend": resolved.mail_backend},
        )
        try:
            yield
        finally:
            if owns_engine:
                shutdown_db(app)
            logger.info("app.shutdown")

    return lifespan


__all__ = ["create_application_lifespan"]
