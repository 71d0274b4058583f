"""Tests for settings models and the TOML loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from aniresolve.config import AniListSettings, LoggingSettings, Settings, load_settings, reload_config
from aniresolve.shared.errors import ApplicationError, ErrorCode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ANIRESOLVE_API__ANILIST__TIMEOUT", "ANIRESOLVE_LOGGING__LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "aniresolve.toml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_default_settings(self) -> None:
        settings = Settings()

        assert settings.api.anilist.endpoint == "https://graphql.anilist.co"
        assert settings.api.anilist.compound_chunk_size == 60
        assert settings.resolver.max_walk_depth == 32
        assert settings.resolver.manual_search_enabled is True
        assert settings.logging.level == "INFO"

    def test_chunk_size_must_fit_complexity_budget(self) -> None:
        with pytest.raises(ValidationError):
            AniListSettings(compound_chunk_size=61)

    def test_log_level_is_normalised(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")


class TestLoadSettings:
    """Loading from TOML with environment overrides."""

    def test_load_from_toml(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            """
[api.anilist]
timeout = 10.0
retry_attempts = 5

[resolver]
long_title_threshold = 0.25
manual_search_enabled = false
""",
        )

        settings = load_settings(path)

        assert settings.api.anilist.timeout == 10.0
        assert settings.api.anilist.retry_attempts == 5
        assert settings.resolver.long_title_threshold == 0.25
        assert settings.resolver.manual_search_enabled is False

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "[api.anilist]\ntimeout = 10.0\nretry_attempts = 5\n")
        monkeypatch.setenv("ANIRESOLVE_API__ANILIST__TIMEOUT", "5")

        settings = load_settings(path)

        assert settings.api.anilist.timeout == 5.0
        assert settings.api.anilist.retry_attempts == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "missing.toml")

        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "[resolver\nmax_walk_depth = ")

        with pytest.raises(ApplicationError):
            load_settings(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "[resolver]\nlong_title_threshold = 5\n")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(path)

        assert "Invalid configuration" in exc_info.value.message

    def test_round_trip_through_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "out" / "aniresolve.toml"
        Settings(resolver={"max_walk_depth": 8}).to_toml_file(path)

        assert load_settings(path).resolver.max_walk_depth == 8

    def test_reload_config(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "[resolver]\nmax_walk_depth = 4\n")

        assert reload_config(path).resolver.max_walk_depth == 4
