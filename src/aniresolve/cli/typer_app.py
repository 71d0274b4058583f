"""
AniResolve Typer CLI Application

Entry point of the ``aniresolve`` command. Commands delegate to the
handlers in :mod:`aniresolve.cli.resolve_handler` and exit with the code
they return.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from aniresolve.cli.options import (
    LogLevel,
    config_option,
    json_output_option,
    log_level_option,
    version_option,
)
from aniresolve.cli.resolve_handler import handle_inspect_command, handle_resolve_command
from aniresolve.shared.constants import Application


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{Application.NAME} {Application.VERSION}")
        raise typer.Exit


app = typer.Typer(
    name=Application.NAME,
    help=Application.DESCRIPTION,
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[bool, version_option] = False,
) -> None:
    """Resolve anime release file names against AniList."""
    version_callback(version)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit


@app.command("resolve")
def resolve_command(
    names: Annotated[list[str], typer.Argument(help="Release file names to resolve")],
    json_output: Annotated[bool, json_output_option] = False,
    log_level: Annotated[Optional[LogLevel], log_level_option] = None,
    config: Annotated[Optional[Path], config_option] = None,
) -> None:
    """Resolve file names to AniList entries, seasons and episodes."""
    exit_code = handle_resolve_command(
        names,
        json_output=json_output,
        config_path=config,
        log_level=log_level.value if log_level else None,
    )
    raise typer.Exit(exit_code)


@app.command("inspect")
def inspect_command(
    media_id: Annotated[int, typer.Argument(help="AniList media id")],
    json_output: Annotated[bool, json_output_option] = False,
    log_level: Annotated[Optional[LogLevel], log_level_option] = None,
    config: Annotated[Optional[Path], config_option] = None,
) -> None:
    """Show the search titles and parent series of an AniList entry."""
    exit_code = handle_inspect_command(
        media_id,
        json_output=json_output,
        config_path=config,
        log_level=log_level.value if log_level else None,
    )
    raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
