"""Structured logging for AniResolve.

This module provides the logger setup used by the CLI and helper functions
that attach operation context to log records.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from aniresolve.shared.constants import LoggingDefaults
from aniresolve.shared.errors import AniResolveError, ErrorContext


class StructuredFormatter(logging.Formatter):
    """Formatter that renders log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Log record

        Returns:
            JSON encoded log entry
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("error_code", "context", "operation", "duration_ms", "result_info"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _create_rich_console() -> Console:
    """Create the themed rich console used for log output."""
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=True)


def _console_handler(log_level: int, *, use_rich_console: bool) -> logging.Handler:
    handler: logging.Handler
    if use_rich_console:
        handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
    handler.setLevel(log_level)
    return handler


def setup_structured_logger(
    name: str = LoggingDefaults.ROOT_LOGGER,
    level: str = LoggingDefaults.LEVEL,
    log_file: str | None = None,
    *,
    console_output: bool = True,
    use_rich_console: bool = True,
) -> logging.Logger:
    """Configure a logger for structured output.

    Args:
        name: Logger name (default: "aniresolve")
        level: Log level name (default: "INFO")
        log_file: Optional path of a JSON lines log file
        console_output: Attach a console handler on stderr
        use_rich_console: Use rich console output instead of JSON on stderr

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    if console_output:
        logger.addHandler(_console_handler(log_level, use_rich_console=use_rich_console))

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def _merge_context(*contexts: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for context in contexts:
        if context is None:
            continue
        if isinstance(context, ErrorContext):
            merged.update(context.safe_dict())
        else:
            merged.update(context)
    return merged


def log_operation_error(
    logger: logging.Logger,
    error: AniResolveError,
    operation: str | None = None,
    additional_context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Log an AniResolveError with its structured context.

    Args:
        logger: Logger instance
        error: The error to record
        operation: Operation name, defaults to the one stored on the error
        additional_context: Extra context merged over the error context
    """
    context_dict = _merge_context(error.context, additional_context)

    logger.error(
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Log the successful completion of an operation at DEBUG level.

    Args:
        logger: Logger instance
        operation: Operation name
        duration_ms: Elapsed time in milliseconds
        result_info: Result summary
        context: Context information
    """
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
            "context": _merge_context(context),
        },
    )
