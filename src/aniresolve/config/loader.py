"""Settings loader and singleton manager.

This module handles:
- Configuration file loading from TOML
- Environment variable overrides
- Thread-safe singleton pattern for the Settings instance
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import toml
from pydantic import ValidationError

from aniresolve.config.models.settings import Settings
from aniresolve.shared.constants import Application
from aniresolve.shared.errors import create_config_error

logger = logging.getLogger(__name__)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        """Reload the global settings instance from configuration files."""
        with self._lock:
            self._instance = load_settings(config_path)

        return self._instance


def _default_config_paths() -> list[Path]:
    return [
        Path(Application.CONFIG_FILE),
        Path(f"{Application.NAME}.toml"),
        Path.home() / f".{Application.NAME}" / "config.toml",
    ]


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are tried before falling back to environment
            variables and built-in defaults.

    Returns:
        Settings instance loaded from the specified source

    Raises:
        ApplicationError: If the file is missing, unreadable or invalid
    """
    if config_path is None:
        config_path = next((path for path in _default_config_paths() if path.exists()), None)

    try:
        if config_path is not None:
            return Settings.from_toml_file(config_path)
        return Settings()
    except FileNotFoundError as e:
        raise create_config_error(
            f"Configuration file not found: {config_path}",
            config_path=str(config_path),
            original_error=e,
        ) from e
    except (toml.TomlDecodeError, OSError) as e:
        raise create_config_error(
            f"Failed to read configuration: {e}",
            config_path=str(config_path) if config_path else None,
            original_error=e,
        ) from e
    except ValidationError as e:
        raise create_config_error(
            f"Invalid configuration: {e.error_count()} error(s)",
            config_path=str(config_path) if config_path else None,
            original_error=e,
        ) from e


_settings_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _settings_loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Force a reload of the global settings instance."""
    return _settings_loader.reload_config(config_path)
