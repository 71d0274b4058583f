"""
Reusable Typer Options Module

Options shared by the AniResolve commands:
- log_level: Logging level (enum-based)
- json_output: JSON output mode (flag-based)
- config: TOML configuration file
"""

from __future__ import annotations

from enum import Enum

import typer


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to the configured level.",
)

json_output_option = typer.Option(
    "--json",
    help="Enable machine-readable JSON output instead of a table.",
)

config_option = typer.Option(
    "--config",
    "-c",
    help="Path to a TOML configuration file.",
    dir_okay=False,
)

version_option = typer.Option(
    "--version",
    "-V",
    help="Show version information and exit.",
    is_eager=True,
)
