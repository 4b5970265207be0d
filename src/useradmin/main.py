"""FastAPI application entry point."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .api.v1.router import create_api_router
from .app.lifecycles import create_application_lifespan
from .common.exceptions import (
    api_error_handler,
    http_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .common.problem_details import ApiError
from .features.notifications import CredentialNotifier, build_notifier
from .settings import Settings, get_settings

API_PREFIX = "/api/v1"
type HttpExceptionHandler = Callable[[Request, Exception], Response | Awaitable[Response]]


def _as_http_exception_handler(handler: Callable[..., Response]) -> HttpExceptionHandler:
    return cast(HttpExceptionHandler, handler)


def create_app(
    settings: Settings | None = None,
    *,
    notifier: CredentialNotifier | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings + logging first so everything else uses the configured root logger.
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=create_application_lifespan(settings=settings),
    )
    app.state.settings = settings
    app.state.notifier = notifier or build_notifier(settings)
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_exception_handler(
        RequestValidationError, _as_http_exception_handler(request_validation_exception_handler)
    )
    app.add_exception_handler(HTTPException, _as_http_exception_handler(http_exception_handler))
    app.add_exception_handler(
        StarletteHTTPException, _as_http_exception_handler(http_exception_handler)
    )
    app.add_exception_handler(ApiError, _as_http_exception_handler(api_error_handler))
    app.add_exception_handler(Exception, _as_http_exception_handler(unhandled_exception_handler))

    register_middleware(app)
    app.include_router(create_api_router(), prefix=API_PREFIX)
    return app


__all__ = ["API_PREFIX", "create_app"]
