"""Errors raised by AniResolve.

Every exception carries an ErrorCode, a message and an ErrorContext with
primitive-only data so it can be logged as structured JSON. The wrapped
httpx, pydantic or toml exception is kept in ``original_error``.

Expected resolution misses (no verified match, exhausted relation chain,
empty search) are never raised; they surface as a ``failed`` flag on the
result objects. Only contract violations and infrastructure faults use the
classes below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Machine-readable error codes, also emitted as ``error_code`` in logs."""

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    # Path becomes str, Enum its value, None the string "None"
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif val is None:
            coerced[key] = "None"
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Where an error happened: the failing operation plus a few primitive values
    (HTTP status, chunk index) worth logging next to it.
    """

    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict, guaranteeing an ``additional_data`` key.

        Example:
            >>> ErrorContext(operation="search").safe_dict()
            {'operation': 'search', 'additional_data': {}}
        """
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        data["additional_data"] = dict(self.additional_data or {})
        return data


class AniResolveError(Exception):
    """Base exception class for all AniResolve errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(AniResolveError):
    """Domain-specific errors.

    These errors occur when resolution rules are violated, for example
    calling the season walker without an episode or force flag.
    """


class InfrastructureError(AniResolveError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems like the
    catalogue API.
    """


class AniResolveNetworkError(InfrastructureError):
    """Network-related errors.

    Examples:
    - Connection errors
    - Request timeouts
    - Rate limit exhaustion
    - API server errors
    """


class AniResolveParsingError(DomainError):
    """Data parsing errors.

    Examples:
    - Malformed GraphQL payloads
    - Unexpected tokenizer output
    """


class SeasonResolutionError(DomainError):
    """Raised when the season walker is invoked with missing input."""


class ApplicationError(AniResolveError):
    """Application-level errors such as invalid configuration."""


def create_api_error(
    message: str,
    operation: str | None = None,
    original_error: Exception | None = None,
    code: ErrorCode = ErrorCode.API_REQUEST_FAILED,
) -> AniResolveNetworkError:
    """Create an API error with context."""
    return AniResolveNetworkError(
        code,
        message,
        ErrorContext(operation=operation),
        original_error,
    )


def create_parsing_error(
    message: str,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> AniResolveParsingError:
    """Create a parsing error with context."""
    return AniResolveParsingError(
        ErrorCode.API_INVALID_RESPONSE,
        message,
        ErrorContext(operation=operation),
        original_error,
    )


def create_config_error(
    message: str,
    config_path: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_path": config_path} if config_path else None
    )
    return ApplicationError(
        ErrorCode.CONFIGURATION_ERROR,
        message,
        ErrorContext(operation="load_settings", additional_data=additional_data),
        original_error,
    )
