"""Application and logging configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from aniresolve.shared.constants import Application, LoggingDefaults


class AppSettings(BaseModel):
    """Application configuration."""

    name: str = Field(default=Application.NAME, description="Application name")
    version: str = Field(default=Application.VERSION, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages logging behavior including level, file output
    and console output settings.
    """

    level: str = Field(default=LoggingDefaults.LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    console_output: bool = Field(default=True, description="Enable console logging")
    use_rich_console: bool = Field(default=True, description="Render console logs with rich")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LoggingDefaults.LEVELS:
            msg = f"Invalid log level '{value}', expected one of {', '.join(LoggingDefaults.LEVELS)}"
            raise ValueError(msg)
        return level


__all__ = ["AppSettings", "LoggingSettings"]
