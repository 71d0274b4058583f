"""Application identity constants."""


class Application:
    """Application metadata."""

    NAME = "aniresolve"
    VERSION = "0.1.0"
    DESCRIPTION = "Resolve anime release file names to AniList seasons and episodes"
    CONFIG_FILE = "config/aniresolve.toml"
    ENV_PREFIX = "ANIRESOLVE_"
