"""ezkit command line."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .logging import setup_logging
from .paths import lookup_path
from .security import hash_value, new_iv, new_key
from .settings import get_settings

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="ezkit utilities: key material, hashing and nested path lookups.",
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"ezkit {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Print the ezkit version and exit.",
            callback=_print_version,
            is_eager=True,
        ),
    ] = False,
) -> None:
    setup_logging(get_settings())


@app.command()
def keygen() -> None:
    """Print a new AES-256 key and iv as environment assignments."""

    typer.echo(f"EZKIT_SECURITY_KEY={new_key()}")
    typer.echo(f"EZKIT_SECURITY_IV={new_iv()}")


@app.command("hash")
def hash_command(
    value: Annotated[str, typer.Argument(help="Value to hash.")],
    salt: Annotated[
        str | None,
        typer.Option("--salt", help="Hex salt to apply (a new one is generated when omitted)."),
    ] = None,
) -> None:
    """Hash VALUE with a salted SHA-256."""

    result = hash_value(value, salt)
    typer.echo(f"hash={result.hash}")
    typer.echo(f"salt={result.salt}")


@app.command("get-path")
def get_path_command(
    file: Annotated[Path, typer.Argument(help="JSON document to read.")],
    path: Annotated[str, typer.Argument(help="Slash-delimited path, e.g. menu/starters/0.")],
) -> None:
    """Print the JSON value stored at PATH inside FILE."""

    try:
        document = json.loads(file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"error: {file} does not exist", err=True)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as exc:
        typer.echo(f"error: {file} is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1)

    result = lookup_path(document, path)
    if not result.found:
        typer.echo(f"error: path '{path}' not found", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result.value, ensure_ascii=False))


__all__ = ["app"]
