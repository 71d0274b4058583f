"""AniList API Response Models.

Pydantic models for the AniList GraphQL ``Media`` shape, validated at the
API boundary. Entities are frozen snapshots: a refetch produces a new
object, nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaFormat(str, Enum):
    """AniList media format."""

    TV = "TV"
    TV_SHORT = "TV_SHORT"
    MOVIE = "MOVIE"
    SPECIAL = "SPECIAL"
    OVA = "OVA"
    ONA = "ONA"
    MUSIC = "MUSIC"
    MANGA = "MANGA"
    NOVEL = "NOVEL"
    ONE_SHOT = "ONE_SHOT"


class RelationType(str, Enum):
    """AniList relation edge type (version 2)."""

    ADAPTATION = "ADAPTATION"
    PREQUEL = "PREQUEL"
    SEQUEL = "SEQUEL"
    PARENT = "PARENT"
    SIDE_STORY = "SIDE_STORY"
    CHARACTER = "CHARACTER"
    SUMMARY = "SUMMARY"
    ALTERNATIVE = "ALTERNATIVE"
    SPIN_OFF = "SPIN_OFF"
    OTHER = "OTHER"
    SOURCE = "SOURCE"
    COMPILATION = "COMPILATION"
    CONTAINS = "CONTAINS"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _known_or_raw(enum_cls: type[Enum], value: Any) -> Any:
    """Map a raw string to its enum member, keeping unknown values as strings."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


class MediaTitle(_FrozenModel):
    """Title variants of a media entity."""

    user_preferred: str | None = Field(default=None, alias="userPreferred")
    english: str | None = None
    romaji: str | None = None
    native: str | None = None

    def variants(self) -> tuple[str | None, ...]:
        """All four title fields in preference order."""
        return (self.user_preferred, self.english, self.romaji, self.native)


class NextAiringEpisode(_FrozenModel):
    """Next unaired episode of an airing entity."""

    episode: int | None = None
    airing_at: int | None = Field(default=None, alias="airingAt")


class RelationNode(_FrozenModel):
    """Target of a relation edge."""

    id: int
    type: str | None = None
    format: MediaFormat | str | None = None

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> Any:
        return _known_or_raw(MediaFormat, value)


class RelationEdge(_FrozenModel):
    """Typed link to another entity."""

    relation_type: RelationType | str | None = Field(default=None, alias="relationType")
    node: RelationNode

    @field_validator("relation_type", mode="before")
    @classmethod
    def _parse_relation_type(cls, value: Any) -> Any:
        return _known_or_raw(RelationType, value)


class MediaEntity(_FrozenModel):
    """One catalogued season, movie, OVA or special.

    Attributes:
        id: AniList media id
        title: Title variants
        synonyms: Alternative names
        format: Format classification, unknown formats kept as strings
        season_year: Year the entity started airing
        episodes: Total episode count, ``None`` while unknown
        next_airing_episode: Next unaired episode while airing
        edges: Relation edges to other entities
    """

    id: int
    title: MediaTitle = Field(default_factory=MediaTitle)
    synonyms: tuple[str, ...] = ()
    format: MediaFormat | str | None = None
    status: str | None = None
    season: str | None = None
    season_year: int | None = Field(default=None, alias="seasonYear")
    episodes: int | None = None
    is_adult: bool = Field(default=False, alias="isAdult")
    next_airing_episode: NextAiringEpisode | None = Field(default=None, alias="nextAiringEpisode")
    edges: tuple[RelationEdge, ...] = Field(default=(), alias="relations")

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> Any:
        return _known_or_raw(MediaFormat, value)

    @field_validator("synonyms", mode="before")
    @classmethod
    def _parse_synonyms(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(name for name in value if isinstance(name, str))

    @field_validator("is_adult", mode="before")
    @classmethod
    def _parse_is_adult(cls, value: Any) -> Any:
        return bool(value)

    @field_validator("edges", mode="before")
    @classmethod
    def _flatten_relations(cls, value: Any) -> Any:
        # GraphQL wraps the list as relations { edges [...] }
        if value is None:
            return ()
        if isinstance(value, dict):
            return tuple(value.get("edges") or ())
        return value

    @property
    def capacity(self) -> int | None:
        """Episodes released so far: next unaired index if airing, else the total."""
        if self.next_airing_episode and self.next_airing_episode.episode:
            return self.next_airing_episode.episode
        return self.episodes

    @property
    def display_title(self) -> str | None:
        """The user-preferred title, required for a successful resolution."""
        return self.title.user_preferred

    def format_is(self, *formats: str) -> bool:
        """Whether the entity format is one of ``formats``."""
        return _enum_value(self.format) in formats

    def edges_of(self, relation: RelationType) -> list[RelationEdge]:
        """Relation edges of one type, in catalogue order."""
        return [edge for edge in self.edges if _enum_value(edge.relation_type) == relation.value]

    def title_values(self, keys: tuple[str, ...]) -> list[str]:
        """Collect the title strings named by dotted ``keys``.

        Keys follow the GraphQL names: ``title.userPreferred``,
        ``title.english``, ``title.romaji``, ``title.native`` and
        ``synonyms``.
        """
        values: list[str] = []
        for key in keys:
            if key == "synonyms":
                values.extend(self.synonyms)
                continue
            field_name = _TITLE_FIELDS.get(key)
            value = getattr(self.title, field_name) if field_name else None
            if value:
                values.append(value)
        return values


_TITLE_FIELDS = {
    "title.userPreferred": "user_preferred",
    "title.english": "english",
    "title.romaji": "romaji",
    "title.native": "native",
}


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class TitleQuery:
    """One aliased title search inside a compound catalogue request.

    Attributes:
        title: Search string
        key: Resolution cache key the result is stored under
        year: Season year filter
        is_adult: Search adult entries instead of general ones
    """

    title: str
    key: str
    year: int | None = None
    is_adult: bool = False
