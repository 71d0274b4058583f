"""AniResolve Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from aniresolve.config.models.api_settings import APISettings
from aniresolve.config.models.app_settings import AppSettings, LoggingSettings
from aniresolve.config.models.resolver_settings import ResolverSettings
from aniresolve.shared.constants import Application

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Unified configuration for every AniResolve domain.

    Environment variables (``ANIRESOLVE_API__ANILIST__TIMEOUT=10``) take
    precedence over values passed in, including those read from TOML.
    """

    model_config = SettingsConfigDict(
        env_prefix=Application.ENV_PREFIX,
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides.

        Raises:
            FileNotFoundError: If the file does not exist
            toml.TomlDecodeError: If the file is not valid TOML
        """
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        logger.debug("Loaded configuration from %s", file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True, by_alias=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
