"""
Resolution Constants

Thresholds used by the verification heuristic and bounds for the season
walker. Distances are on a 0..1 scale, smaller is stricter.
"""

from typing import ClassVar


class VerificationThresholds:
    """Fuzzy distance thresholds scaled by parsed title length."""

    LONG_TITLE_LENGTH = 15  # titles longer than this use LONG
    MEDIUM_TITLE_LENGTH = 9  # titles longer than this use MEDIUM
    LONG = 0.2
    MEDIUM = 0.15
    SHORT = 0.1

    # Looser retry used for the explicit "Season N" rewrite
    SEASON_RETRY = 0.3

    # Each character of offset into the candidate adds 1 / distance
    LOCATION_DISTANCE = 100

    TITLE_KEYS: ClassVar[tuple[str, ...]] = (
        "title.userPreferred",
        "title.english",
        "title.romaji",
        "title.native",
        "synonyms",
    )


class EdgeFormats:
    """Target formats accepted when following relation edges."""

    DEFAULT: ClassVar[tuple[str, ...]] = ("TV", "TV_SHORT")
    SEQUEL_FALLBACK: ClassVar[tuple[str, ...]] = ("TV", "TV_SHORT", "OVA")
    PARENT_SOURCES: ClassVar[tuple[str, ...]] = ("OVA", "ONA")
    SPECIALS: ClassVar[tuple[str, ...]] = ("SPECIAL", "OVA", "ONA")


class SeasonWalkConfig:
    """Season walker bounds."""

    # Longest prequel/sequel chain followed before giving up
    MAX_DEPTH = 32


class ManualSearchConfig:
    """Manual fallback search configuration."""

    EXCLUDED_FORMATS: ClassVar[tuple[str, ...]] = ("OVA",)
    EXCLUDED_FORMATS_LATER_SEASON: ClassVar[tuple[str, ...]] = ("OVA", "MOVIE")
