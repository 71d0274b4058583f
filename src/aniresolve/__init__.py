"""AniResolve: resolve anime release file names to AniList seasons and episodes."""

from aniresolve.shared.constants import Application

__version__ = Application.VERSION

__all__ = ["__version__"]
