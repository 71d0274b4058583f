"""Domain models for season and episode resolution.

All models are frozen: a result is built once and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from aniresolve.core.parser.models import ParsedName
from aniresolve.shared.models.api.anilist import MediaEntity

# A single episode number or a "start ~ end" range
EpisodeDescriptor = Union[int, str]


@dataclass(frozen=True)
class SeasonWalkResult:
    """Outcome of a walk along prequel/sequel relations.

    Attributes:
        media: Entity the walk stopped at
        episode: Episode relative to ``media`` (offset-adjusted on failure)
        offset: Episodes accumulated along the walk
        increment: Whether the walk moved forward along SEQUEL edges
        root_media: Last entity reached when walking forward, else the start
        failed: The chain ended before the episode fitted
    """

    media: MediaEntity
    episode: int | None
    offset: int
    increment: bool
    root_media: MediaEntity
    failed: bool = False


@dataclass(frozen=True)
class PrequelLookup:
    """Root detection result used before an absolute-episode walk."""

    result: SeasonWalkResult
    is_root: bool
    root: MediaEntity | None


@dataclass(frozen=True)
class ManualSearchResult:
    """Outcome of the catalogue title search fallback."""

    media: MediaEntity | None
    failed: bool = False


@dataclass(frozen=True)
class WalkOutcome:
    """Result of routing an out-of-range episode through the walker.

    ``needs_manual_search`` asks the orchestrator to run the title search
    fallback next; ``episode`` is ``None`` when the walk produced no
    usable episode number.
    """

    parsed: ParsedName
    media: MediaEntity | None
    episode: EpisodeDescriptor | None = None
    failed: bool = False
    needs_manual_search: bool = False


@dataclass(frozen=True)
class ResolutionResult:
    """Resolution of one release file.

    Attributes:
        file_name: Name the resolver was given (after cleaning)
        parsed: Tokenized name the result was derived from
        media: Resolved entity, or the best guess when ``failed``
        episode: Episode number, "start ~ end" range, or None
        season: Season index; None only for unseasoned movies
        failed: No verified match with a display title was found
    """

    file_name: str
    parsed: ParsedName
    media: MediaEntity | None
    episode: EpisodeDescriptor | None
    season: int | None
    failed: bool

    @property
    def title(self) -> str | None:
        """Display title of the resolved entity."""
        return self.media.display_title if self.media else None

    @property
    def media_id(self) -> int | None:
        return self.media.id if self.media else None
