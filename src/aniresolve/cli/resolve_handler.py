"""Resolve and inspect command handlers for AniResolve CLI.

This module contains the logic behind the ``resolve`` and ``inspect``
commands, kept apart from the Typer wiring.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aniresolve.cli.json_formatter import format_json_output, resolution_payload
from aniresolve.config import Settings, get_config, load_settings
from aniresolve.core.matching import AnimeResolver, ResolutionResult, parent_for_special
from aniresolve.core.normalization import media_search_titles
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.services.anilist import AniListClient
from aniresolve.shared.errors import AniResolveError, ApplicationError
from aniresolve.shared.logging import log_operation_error, setup_structured_logger
from aniresolve.shared.models.api.anilist import MediaEntity

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2


def prepare_settings(config_path: Path | None, log_level: str | None) -> Settings:
    """Load settings and configure logging for a command.

    Raises:
        ApplicationError: If the configuration cannot be loaded
    """
    settings = load_settings(config_path) if config_path else get_config()
    setup_structured_logger(
        level=log_level or settings.logging.level,
        log_file=settings.logging.file,
        console_output=settings.logging.console_output,
        use_rich_console=settings.logging.use_rich_console,
    )
    return settings


def handle_resolve_command(
    names: Sequence[str],
    *,
    json_output: bool = False,
    config_path: Path | None = None,
    log_level: str | None = None,
) -> int:
    """Handle the resolve command.

    Returns:
        0 when every name resolved, 1 when any failed, 2 on configuration errors
    """
    console = Console()
    try:
        settings = prepare_settings(config_path, log_level)
    except ApplicationError as e:
        _report_error(console, "resolve", e.message, json_output=json_output)
        return EXIT_CONFIG_ERROR

    statistics = StatisticsCollector()
    results = asyncio.run(_resolve(names, settings, statistics))

    if json_output:
        data = resolution_payload(results, statistics.get_summary())
        typer.echo(format_json_output(success=True, command="resolve", data=data).decode())
    else:
        console.print(_results_table(results))

    failed = sum(1 for result in results if result.failed)
    logger.info("Resolved %d of %d file(s)", len(results) - failed, len(results))
    return EXIT_FAILED if failed else EXIT_OK


async def _resolve(
    names: Sequence[str],
    settings: Settings,
    statistics: StatisticsCollector,
) -> list[ResolutionResult]:
    async with AniListClient(settings.api.anilist) as client:
        resolver = AnimeResolver(
            client,
            settings=settings.resolver,
            chunk_size=settings.api.anilist.compound_chunk_size,
            statistics=statistics,
        )
        return await resolver.resolve_file_anime(list(names))


def handle_inspect_command(
    media_id: int,
    *,
    json_output: bool = False,
    config_path: Path | None = None,
    log_level: str | None = None,
) -> int:
    """Handle the inspect command: show how an entity would be searched for.

    Returns:
        0 on success, 1 if the entity is missing or the request failed,
        2 on configuration errors
    """
    console = Console()
    try:
        settings = prepare_settings(config_path, log_level)
    except ApplicationError as e:
        _report_error(console, "inspect", e.message, json_output=json_output)
        return EXIT_CONFIG_ERROR

    try:
        media = asyncio.run(_fetch(media_id, settings))
    except AniResolveError as e:
        log_operation_error(logger=logger, error=e, operation="inspect")
        _report_error(console, "inspect", e.message, json_output=json_output)
        return EXIT_FAILED

    if media is None:
        _report_error(console, "inspect", f"No anime with id {media_id}", json_output=json_output)
        return EXIT_FAILED

    titles = media_search_titles(media)
    media_format = getattr(media.format, "value", media.format)
    parent_id = parent_for_special(media)

    if json_output:
        data = {
            "id": media.id,
            "title": media.display_title,
            "format": media_format,
            "capacity": media.capacity,
            "search_titles": titles,
            "parent_id": parent_id,
        }
        typer.echo(format_json_output(success=True, command="inspect", data=data).decode())
    else:
        console.print(f"[bold]{media.id}[/bold] {escape(media.display_title or '-')} ({media_format}, {media.capacity} ep)")
        if parent_id is not None:
            console.print(f"Parent series: {parent_id}")
        for title in titles:
            console.print(f"  {title}", markup=False)
    return EXIT_OK


async def _fetch(media_id: int, settings: Settings) -> MediaEntity | None:
    async with AniListClient(settings.api.anilist) as client:
        return await client.get_by_id(media_id)


def _results_table(results: Sequence[ResolutionResult]) -> Table:
    table = Table(title="Resolution results")
    table.add_column("File", overflow="fold")
    table.add_column("Title", overflow="fold")
    table.add_column("ID", justify="right")
    table.add_column("Season", justify="right")
    table.add_column("Episode", justify="right")
    table.add_column("Status")

    for result in results:
        table.add_row(
            escape(result.file_name),
            escape(result.title or "-"),
            str(result.media_id) if result.media_id is not None else "-",
            str(result.season) if result.season is not None else "-",
            str(result.episode) if result.episode is not None else "-",
            "[red]failed[/red]" if result.failed else "[green]resolved[/green]",
        )
    return table


def _report_error(console: Console, command: str, message: str, *, json_output: bool) -> None:
    if json_output:
        typer.echo(format_json_output(success=False, command=command, errors=[message]).decode())
    else:
        console.print(f"[red]Error:[/red] {message}")
