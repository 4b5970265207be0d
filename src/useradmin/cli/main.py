"""useradmin command line interface."""

from __future__ import annotations

from typing import Annotated

import typer

from .common import load_settings
from .db import app as db_app
from .users import app as users_app

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="User administration service CLI.",
)
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command("start", help="Serve the HTTP API with uvicorn.")
def start(
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port.")] = None,
    reload: Annotated[bool, typer.Option("--reload/--no-reload")] = False,
) -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "useradmin.main:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


__all__ = ["app"]
