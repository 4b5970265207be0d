"""`useradmin db` commands."""

from __future__ import annotations

import typer

from useradmin.db import create_schema

from .common import load_settings, open_engine

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Database commands.")


@app.command("init", help="Create any missing tables.")
def init() -> None:
    settings = load_settings()
    with open_engine(settings) as engine:
        create_schema(engine)
    typer.echo("Database schema is up to date.")
