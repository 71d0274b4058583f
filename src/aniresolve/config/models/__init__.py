"""Configuration models for AniResolve."""

from aniresolve.config.models.api_settings import AniListSettings, APISettings
from aniresolve.config.models.app_settings import AppSettings, LoggingSettings
from aniresolve.config.models.resolver_settings import ResolverSettings
from aniresolve.config.models.settings import Settings

__all__ = [
    "APISettings",
    "AniListSettings",
    "AppSettings",
    "LoggingSettings",
    "ResolverSettings",
    "Settings",
]
