"""Configuration package for AniResolve."""

from aniresolve.config.loader import get_config, load_settings, reload_config
from aniresolve.config.models import (
    AniListSettings,
    APISettings,
    AppSettings,
    LoggingSettings,
    ResolverSettings,
    Settings,
)

__all__ = [
    "APISettings",
    "AniListSettings",
    "AppSettings",
    "LoggingSettings",
    "ResolverSettings",
    "Settings",
    "get_config",
    "load_settings",
    "reload_config",
]
