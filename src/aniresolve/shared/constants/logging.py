"""Logging constants."""


class LoggingDefaults:
    """Default logging configuration values."""

    ROOT_LOGGER = "aniresolve"
    LEVEL = "INFO"
    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
