"""Typed model for tokenized release file names."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Union

from aniresolve.shared.constants import NormalizationConfig

# A single episode or an inclusive (start, end) range
EpisodeNumber = Union[int, tuple[int, int]]

_SEASON_MARKER_PATTERN = re.compile(r"\bS\d+(?:E\d+)?\b|\bseason\b", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedName:
    """Structured output of the filename tokenizer.

    Attributes:
        anime_title: Title portion of the file name
        anime_year: Year hint, if the name carries one
        anime_season: Season number, if the name carries one
        episode_number: Episode or inclusive episode range
        release_information: Release tags such as "Batch" or "Remastered"
        anime_type: Media-type tag ("OP", "ED", "OVA", ...)
        release_group: Release group name
        file_name: Name the tokenizer was given
    """

    anime_title: str = ""
    anime_year: int | None = None
    anime_season: int | None = None
    episode_number: EpisodeNumber | None = None
    release_information: str = ""
    anime_type: str | None = None
    release_group: str | None = None
    file_name: str = ""
    raw: dict[str, object] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_fields(cls, data: object, file_name: str = "") -> ParsedName:
        """Create a ParsedName from a mapping of raw tokenizer fields.

        Raises:
            TypeError: If data is not a mapping
        """
        if not isinstance(data, Mapping):
            raise TypeError("Tokenizer fields must be a mapping")

        raw = {key: value for key, value in data.items() if isinstance(key, str)}
        return cls(
            anime_title=_coerce_str(raw.get("anime_title")) or "",
            anime_year=_coerce_int(raw.get("anime_year")),
            anime_season=_coerce_int(_first(raw.get("anime_season"))),
            episode_number=_parse_episode_number(raw.get("episode_number")),
            release_information=" ".join(_coerce_str_list(raw.get("release_information"))),
            anime_type=_coerce_str(_first(raw.get("anime_type"))),
            release_group=_coerce_str(raw.get("release_group")),
            file_name=_coerce_str(raw.get("file_name")) or file_name,
            raw=raw,
        )

    def with_title(self, title: str) -> ParsedName:
        """Return a copy carrying a different title."""
        return replace(self, anime_title=title)

    @property
    def search_title(self) -> str:
        """Title used for catalogue queries and cache keys.

        The tokenizer lifts season markers out of the title; a later season
        gets " S{n}" back so that "Show S2" and "Show" stay apart.
        """
        season = self.anime_season
        if season and season > 1 and not _SEASON_MARKER_PATTERN.search(self.anime_title):
            return f"{self.anime_title} S{season}"
        return self.anime_title

    @property
    def is_range(self) -> bool:
        """Whether the episode is an inclusive range."""
        return isinstance(self.episode_number, tuple)

    @property
    def episode_upper(self) -> int | None:
        """The single episode, or the upper bound of a range."""
        if isinstance(self.episode_number, tuple):
            return self.episode_number[1]
        return self.episode_number

    @property
    def is_excluded_type(self) -> bool:
        """Whether the media-type tag marks non-episode content."""
        if not self.anime_type:
            return False
        return self.anime_type.upper() in NormalizationConfig.EXCLUDED_TYPES


def _first(value: object) -> object:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _coerce_str(value: object) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _coerce_str_list(value: object) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [item for item in (_coerce_str(entry) for entry in value) if item]
    single = _coerce_str(value)
    return [single] if single else []


def _coerce_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return int(stripped)
        except ValueError:
            try:
                # fractional episodes such as "07.5" count as their whole part
                return int(float(stripped))
            except ValueError:
                return None
    return None


def _parse_episode_number(value: object) -> EpisodeNumber | None:
    if isinstance(value, (list, tuple)):
        converted = [item for item in (_coerce_int(entry) for entry in value) if item is not None]
        if len(converted) >= 2:
            return (converted[0], converted[-1])
        if converted:
            return converted[0]
        return None
    return _coerce_int(value)
