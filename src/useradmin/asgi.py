"""ASGI entry point for uvicorn (``useradmin.asgi:app``)."""

from __future__ import annotations

from .main import create_app

app = create_app()
