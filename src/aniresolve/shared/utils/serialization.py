"""Dataclass serialization utilities for AniResolve.

Converts result dataclasses, including nested pydantic models and enums,
into JSON-serializable dictionaries for CLI output.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel


def to_dict(obj: Any) -> dict[str, Any]:
    """Convert a dataclass to a JSON-serializable dictionary.

    Args:
        obj: Dataclass instance to convert

    Returns:
        Dictionary representation of the dataclass

    Raises:
        TypeError: If obj is not a dataclass instance

    Example:
        >>> @dataclass
        ... class Hit:
        ...     title: str
        ...     episode: int
        >>> to_dict(Hit(title="Frieren", episode=5))
        {'title': 'Frieren', 'episode': 5}
    """
    if not is_dataclass(obj) or isinstance(obj, type):
        error_msg = f"{type(obj).__name__} is not a dataclass"
        raise TypeError(error_msg)

    return {field.name: _convert_recursive(getattr(obj, field.name)) for field in fields(obj)}


def _convert_recursive(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_dict(obj)

    if isinstance(obj, dict):
        return {str(key): _convert_recursive(value) for key, value in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [_convert_recursive(item) for item in obj]

    return str(obj)
