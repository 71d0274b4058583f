"""
JSON output for the AniResolve CLI.

Every command printed with ``--json`` emits one envelope::

    {"command": ..., "data": ..., "errors": [...], "success": ..., "timestamp": ...}

``data`` for ``resolve`` is built by :func:`resolution_payload`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import orjson
from pydantic import BaseModel

from aniresolve.core.matching import ResolutionResult
from aniresolve.shared.utils import to_dict

_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _default(obj: Any) -> Any:
    # orjson handles dataclasses natively but not pydantic models or tuples
    # nested inside them
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, (tuple, frozenset, set)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def _envelope(success: bool, command: str, data: Any, errors: list[str]) -> dict[str, Any]:
    return {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
    }


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
) -> bytes:
    """
    Format command output as a JSON envelope.

    Any error forces ``success`` to False. Data that cannot be serialized
    is replaced by an error envelope rather than raising.

    Args:
        success: Whether the command executed successfully
        command: The command name ("resolve" or "inspect")
        data: The command's output data
        errors: Error messages to report

    Returns:
        JSON-encoded bytes ready for output
    """
    errors = list(errors or [])
    if errors:
        success = False

    try:
        return orjson.dumps(_envelope(success, command, data, errors), default=_default, option=_OPTIONS)
    except TypeError as e:
        fallback = _envelope(False, command, None, [f"JSON serialization failed: {e!s}"])
        return orjson.dumps(fallback, option=_OPTIONS)


def result_to_dict(result: ResolutionResult) -> dict[str, Any]:
    """Flatten a resolution result, adding the display title and media id."""
    data = to_dict(result)
    data["title"] = result.title
    data["media_id"] = result.media_id
    return data


def resolution_payload(results: Sequence[ResolutionResult], summary: dict[str, Any]) -> dict[str, Any]:
    """Build the ``data`` section of the ``resolve`` command's output."""
    return {
        "results": [result_to_dict(result) for result in results],
        "statistics": summary,
    }
