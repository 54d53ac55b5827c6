"""CLI entry point using Typer."""

import json
import os
import sys
from collections.abc import Callable
from functools import wraps
from typing import Annotated, Any, TypeVar

import typer

from anniversary.config import get_max_upload_bytes, get_root_path
from anniversary.exceptions import AnniversaryError
from anniversary.logging_utils import setup_logging
from anniversary.site import Site

app = typer.Typer(help="Anniversary site - photos, notes and letters")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000

R = TypeVar("R")

RootOption = Annotated[
    str | None,
    typer.Option(
        "--root",
        help="Data root (path or fsspec URI); defaults to $ANNIVERSARY_ROOT or cwd",
    ),
]


def handle_cli_errors(func: Callable[..., R]) -> Callable[..., R]:
    """Handle common CLI errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> R:  # noqa: ANN401
        try:
            return func(*args, **kwargs)
        except (AnniversaryError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    return wrapper


def _site(root: str | None) -> Site:
    return Site.from_root(
        root or get_root_path(),
        max_upload_bytes=get_max_upload_bytes(),
    )


def _echo_json(payload: Any) -> None:  # noqa: ANN401
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command("init")
@handle_cli_errors
def cmd_init(root: RootOption = None) -> None:
    """Create the JSON stores and image folders."""
    setup_logging(stream=sys.stderr)
    site = _site(root)
    site.initialize()
    typer.echo(f"Data root ready at '{site.root}'")


@app.command("serve")
@handle_cli_errors
def cmd_serve(
    root: RootOption = None,
    host: Annotated[str, typer.Option(help="Interface to bind")] = DEFAULT_HOST,
    port: Annotated[int, typer.Option(help="Port to listen on")] = DEFAULT_PORT,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
) -> None:
    """Run the HTTP server."""
    import uvicorn

    setup_logging(stream=sys.stderr)
    if root:
        os.environ["ANNIVERSARY_ROOT"] = root
    uvicorn.run("anniversary.main:app", host=host, port=port, reload=reload)


@app.command("photos")
@handle_cli_errors
def cmd_photos(root: RootOption = None) -> None:
    """Print the gallery photos as JSON."""
    setup_logging(stream=sys.stderr)
    _echo_json(_site(root).photos.list())


@app.command("notes")
@handle_cli_errors
def cmd_notes(
    root: RootOption = None,
    tag: Annotated[str | None, typer.Option(help="Only show this tag")] = None,
) -> None:
    """Print the visible notes as JSON, pinned first."""
    setup_logging(stream=sys.stderr)
    _echo_json(_site(root).notes.list(tag))


@app.command("letters")
@handle_cli_errors
def cmd_letters(root: RootOption = None) -> None:
    """Print the letters as JSON, newest first."""
    setup_logging(stream=sys.stderr)
    _echo_json(_site(root).letters.list())


if __name__ == "__main__":
    app()
