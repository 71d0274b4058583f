"""
Title Normalization Constants

Patterns used to clean release file names and to build alternative
catalogue queries.
"""

from typing import ClassVar


class NormalizationConfig:
    """Patterns for cleaning release file names."""

    VIDEO_EXTENSIONS: ClassVar[tuple[str, ...]] = (
        "mkv",
        "mp4",
        "avi",
        "mov",
        "wmv",
        "flv",
        "webm",
        "m4v",
        "mpeg",
        "mpg",
        "3gp",
        "ogg",
        "ogv",
    )

    # Parsed media types that are not episodes
    EXCLUDED_TYPES: ClassVar[frozenset[str]] = frozenset(
        {"ED", "ENDING", "NCED", "NCOP", "OP", "OPENING", "PREVIEW", "PV"},
    )

    # Ordinal suffixes for "2nd Season" style rewrites, "th" otherwise
    ORDINAL_SUFFIXES: ClassVar[dict[int, str]] = {1: "st", 2: "nd", 3: "rd"}

    # Season markers removed when re-deriving a root title
    ROOT_TITLE_PATTERN = r"S\d+(E\d+)?"
    SEASON_MARKER_PATTERN = r"S\d+|season-\d+"

    # Titles shorter than this are ignored when building entity search titles
    MIN_SEARCH_TITLE_LENGTH = 4


class TitleCorrections:
    """Franchise-specific corrections for known tokenizer mis-parses.

    Each entry is (pattern, replacement, case_insensitive). Patterns are
    applied in order after period stripping.
    """

    PATTERNS: ClassVar[tuple[tuple[str, str, bool], ...]] = (
        (r"(?<!\d)1-2(?!\d)", "1/2", False),  # Ranma 1/2
        (r"(?<!\d)1_2(?!\d)", "1/2", False),  # Ranma 1/2
        (r"\b(?:new )+(?=prince of tennis)", "", True),  # Prince of Tennis
        (r"Link Click (Season\s*3|S\s*3|\s*03)", "Link Click: Bridon Arc", True),
    )
