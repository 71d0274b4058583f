"""Title normalization module for AniResolve.

This module turns raw release file names into canonical titles and expands
a title into the set of spellings worth querying the catalogue with. It is
the first step of the resolution pipeline.

The normalization process includes:
1. Protection of dotted technical tags (AAC2.0, H.264, 5.1, Vol.3)
2. Extension removal and period-to-space conversion
3. Franchise-specific title corrections
4. Whitespace collapsing

Every function here is pure; ``clean_file_name`` is idempotent.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, overload

from aniresolve.shared.constants import NormalizationConfig, TitleCorrections

if TYPE_CHECKING:
    from aniresolve.core.parser.models import ParsedName
    from aniresolve.shared.models.api.anilist import MediaEntity

logger = logging.getLogger(__name__)

# Dotted tags that must survive period stripping
_PROTECTED_PATTERNS = (
    re.compile(r"\bFLAC5\.1\b"),
    re.compile(r"\b[A-Za-z]{3}\d\.\d\b"),  # AAC2.0, DDP2.0
    re.compile(r"\b[HhXx]\.\d{3}\b"),  # H.264, x.265
    re.compile(r"\b5\.1\b"),
    re.compile(r"\bVol\.\d+\b"),
)
_PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")
_EXTENSION_PATTERN = re.compile(
    r"\.(?:" + "|".join(NormalizationConfig.VIDEO_EXTENSIONS) + r")$",
    re.IGNORECASE,
)
_WHITESPACE_PATTERN = re.compile(r"\s+")

_CORRECTIONS = tuple(
    (re.compile(pattern, re.IGNORECASE if case_insensitive else 0), replacement)
    for pattern, replacement, case_insensitive in TitleCorrections.PATTERNS
)

# Alternative-title rules
_SEASON_SUFFIX_PATTERN = re.compile(r" S(\d+)")
_PUNCTUATION_PATTERN = re.compile(r"[-:]")
_FORMAT_MARKER_PATTERNS = tuple(
    re.compile(rf"\({marker}\)|\b{marker}\b", re.IGNORECASE) for marker in ("tv", "movie", "ova", "ona")
)
_SUBTITLE_SEPARATOR_PATTERN = re.compile(r"\s+-\s+")
_MULTI_TITLE_PATTERN = re.compile(r"^(.+?)\s*\((.+?)\)$")
_NUMBER_GROUP_PATTERN = re.compile(r"\s?\d{2,}(?:\s?\d{2,})*\s?")

_ROOT_TITLE_PATTERN = re.compile(NormalizationConfig.ROOT_TITLE_PATTERN)
_SEASON_MARKER_PATTERN = re.compile(NormalizationConfig.SEASON_MARKER_PATTERN, re.IGNORECASE)

# Entity title rewrites
_SEASON_NUMBER_PATTERN = re.compile(r"Season (\d)", re.IGNORECASE)
_ORDINAL_SEASON_PATTERN = re.compile(r"(\d)(?:nd|rd|th) Season", re.IGNORECASE)


@overload
def clean_file_name(file_name: str, *, apply_corrections: bool = True) -> str: ...


@overload
def clean_file_name(file_name: Sequence[str], *, apply_corrections: bool = True) -> list[str]: ...


def clean_file_name(
    file_name: str | Sequence[str],
    *,
    apply_corrections: bool = True,
) -> str | list[str]:
    """Clean one release file name or a list of them.

    Dotted technical tags are protected before the extension is removed and
    the remaining periods become spaces, so "Show.S01.AAC2.0.mkv" becomes
    "Show S01 AAC2.0".

    Args:
        file_name: A file name or a sequence of file names
        apply_corrections: Apply the franchise-specific title corrections

    Returns:
        The cleaned name, or a list of cleaned names for a sequence

    Examples:
        >>> clean_file_name("Show.Name.S01E05.1080p.H.264.mkv")
        'Show Name S01E05 1080p H.264'
    """
    if isinstance(file_name, str):
        return _clean_name(file_name, apply_corrections)
    return [_clean_name(name, apply_corrections) for name in file_name]


@functools.lru_cache(maxsize=1024)
def _clean_name(name: str, apply_corrections: bool = True) -> str:
    protected: list[str] = []

    def _protect(match: re.Match[str]) -> str:
        protected.append(match.group(0))
        return f"\x00{len(protected) - 1}\x00"

    for pattern in _PROTECTED_PATTERNS:
        name = pattern.sub(_protect, name)

    name = _EXTENSION_PATTERN.sub("", name).replace(".", " ")
    name = _PLACEHOLDER_PATTERN.sub(lambda match: protected[int(match.group(1))], name)

    name = _WHITESPACE_PATTERN.sub(" ", name).strip()
    if apply_corrections:
        name = _apply_corrections(name)
    return name


def _apply_corrections(name: str) -> str:
    # One correction can expose a match for another; stop once nothing changes
    for _pass in range(len(_CORRECTIONS) + 1):
        corrected = name
        for pattern, replacement in _CORRECTIONS:
            corrected = pattern.sub(replacement, corrected)
        corrected = _WHITESPACE_PATTERN.sub(" ", corrected).strip()
        if corrected == name:
            break
        name = corrected
    return name


def normalize_title(raw_title: str, *, apply_corrections: bool = True) -> str:
    """Return the canonical form of a single raw title or file name.

    This is the single-title entry point of :func:`clean_file_name`; the
    catalogue search builds its query titles through it.
    """
    return _clean_name(raw_title, apply_corrections)


def ordinal(number: int) -> str:
    """Return "1st", "2nd", "3rd", "4th" ... for a season number."""
    return f"{number}{NormalizationConfig.ORDINAL_SUFFIXES.get(number, 'th')}"


def alternative_titles(title: str) -> list[str]:
    """Generate the catalogue query spellings for a title.

    Rules add candidates instead of replacing earlier ones; the caller tries
    all of them. Order is stable and duplicates are dropped.

    Args:
        title: A cleaned title

    Returns:
        Candidate titles, most specific first

    Examples:
        >>> alternative_titles("Attack on Titan S2")
        ['Attack on Titan 2nd Season', 'Attack on Titan Season 2']
    """
    titles: dict[str, None] = {}

    def _add(candidate: str) -> None:
        candidate = _WHITESPACE_PATTERN.sub(" ", candidate).strip()
        if candidate:
            titles.setdefault(candidate)

    modified = title
    season_match = _SEASON_SUFFIX_PATTERN.search(title)
    if season_match:
        season = int(season_match.group(1))
        if season == 1:
            # Catalogues list the first season under the bare title
            modified = _SEASON_SUFFIX_PATTERN.sub("", title, count=1)
            _add(modified)
        else:
            modified = _SEASON_SUFFIX_PATTERN.sub(f" {ordinal(season)} Season", title, count=1)
            _add(modified)
            _add(_SEASON_SUFFIX_PATTERN.sub(f" Season {season}", title, count=1))
    else:
        _add(title)

    if _PUNCTUATION_PATTERN.search(modified):
        modified = _WHITESPACE_PATTERN.sub(" ", _PUNCTUATION_PATTERN.sub("", modified))
        _add(modified)

    for pattern in _FORMAT_MARKER_PATTERNS:
        if pattern.search(modified):
            modified = pattern.sub("", modified, count=1)
            _add(modified)

    if _SUBTITLE_SEPARATOR_PATTERN.search(title):
        _add(_SUBTITLE_SEPARATOR_PATTERN.split(title, maxsplit=1)[0])

    multi_title = _MULTI_TITLE_PATTERN.match(modified.strip())
    if multi_title:
        _add(multi_title.group(1))
        _add(multi_title.group(2))

    if _NUMBER_GROUP_PATTERN.search(modified):
        modified = _NUMBER_GROUP_PATTERN.sub(" ", modified)
        _add(modified)

    return list(titles)


def split_multi_title(title: str) -> list[str]:
    """Split "Main (Alt)" into its two halves, or return an empty list."""
    match = _MULTI_TITLE_PATTERN.match(title)
    if not match:
        return []
    return [match.group(1).strip(), match.group(2).strip()]


def cache_key_for(parsed: ParsedName) -> str:
    """Derive the resolution cache key from title, year and release info.

    Files that differ only by episode number share a key. The title is the
    search title, so a later season does not share the first season's key.
    """
    key = parsed.search_title
    if parsed.anime_year:
        key += str(parsed.anime_year)
    if parsed.release_information:
        key += parsed.release_information
    return key


def strip_season_markers(title: str) -> str:
    """Remove "S2" and "season-2" markers from a title."""
    return _SEASON_MARKER_PATTERN.sub("", title)


def root_title(title: str) -> str:
    """Strip the first "S2" / "S2E05" marker to get the franchise title."""
    return _WHITESPACE_PATTERN.sub(" ", _ROOT_TITLE_PATTERN.sub("", title, count=1)).strip()


def media_search_titles(media: MediaEntity) -> list[str]:
    """Build query strings from an entity's own titles and synonyms.

    Used when searching by a known entity rather than by a file name: each
    distinct title longer than three characters is rewritten without
    dashes and apostrophes, and "Season 2" / "2nd Season" also get an "S2"
    spelling.
    """
    grouped = _dedupe(
        name
        for name in (*media.title.variants(), *media.synonyms)
        if name and len(name) >= NormalizationConfig.MIN_SEARCH_TITLE_LENGTH
    )
    titles: list[str] = []

    def _append(title: str) -> None:
        titles.append(title)
        season = _SEASON_NUMBER_PATTERN.search(title)
        ordinal_season = _ORDINAL_SEASON_PATTERN.search(title)
        if season:
            titles.append(_SEASON_NUMBER_PATTERN.sub(f"S{season.group(1)}", title, count=1))
        elif ordinal_season:
            titles.append(_ORDINAL_SEASON_PATTERN.sub(f"S{ordinal_season.group(1)}", title, count=1))

    for name in grouped:
        if "-" in name:
            _append(name.replace("-", " "))
        if "'" in name:
            _append(name.replace("'", ""))
        _append(name.replace("-", "").replace('"', ""))

    return titles


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))
