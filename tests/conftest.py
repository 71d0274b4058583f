"""
Pytest configuration and shared fixtures for AniResolve tests.

This module provides an in-memory AniList catalogue and factories for
media entities and relation chains, so resolver tests run without network
access.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from aniresolve.core.matching.services import CatalogueSearchService, ResolutionCache
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.shared.constants import VerificationThresholds
from aniresolve.shared.models.api.anilist import MediaEntity, TitleQuery


def edge(relation: str, node_id: int, fmt: str = "TV", node_type: str = "ANIME") -> dict[str, Any]:
    """Build a raw relation edge payload."""
    return {"relationType": relation, "node": {"id": node_id, "type": node_type, "format": fmt}}


def make_media(
    media_id: int,
    title: str,
    episodes: int | None = 12,
    fmt: str | None = "TV",
    *,
    edges: Sequence[dict[str, Any]] = (),
    season_year: int | None = None,
    next_episode: int | None = None,
    synonyms: Sequence[str] = (),
    english: str | None = None,
    romaji: str | None = None,
    is_adult: bool = False,
) -> MediaEntity:
    """Build a MediaEntity from the same shape AniList returns."""
    return MediaEntity.model_validate(
        {
            "id": media_id,
            "title": {
                "userPreferred": title,
                "english": english if english is not None else title,
                "romaji": romaji if romaji is not None else title,
                "native": None,
            },
            "synonyms": list(synonyms),
            "format": fmt,
            "seasonYear": season_year,
            "episodes": episodes,
            "isAdult": is_adult,
            "nextAiringEpisode": {"episode": next_episode} if next_episode else None,
            "relations": {"edges": list(edges)},
        }
    )


def make_chain(titles: Sequence[str], episodes: int | Sequence[int], first_id: int = 1) -> list[MediaEntity]:
    """Build TV seasons linked by PREQUEL/SEQUEL edges, in order."""
    counts = [episodes] * len(titles) if isinstance(episodes, int) else list(episodes)
    chain = []
    for index, title in enumerate(titles):
        media_id = first_id + index
        links = []
        if index > 0:
            links.append(edge("PREQUEL", media_id - 1))
        if index < len(titles) - 1:
            links.append(edge("SEQUEL", media_id + 1))
        chain.append(make_media(media_id, title, counts[index], edges=links))
    return chain


class FakeAniList:
    """In-memory stand-in for AniListClient.

    Compound searches match a title field exactly (case-insensitive);
    manual searches match by substring. Every call is recorded.
    """

    def __init__(self, *entities: MediaEntity) -> None:
        self.entities = {media.id: media for media in entities}
        self.compound_calls: list[list[TitleQuery]] = []
        self.id_calls: list[int] = []
        self.search_calls: list[dict[str, Any]] = []

    async def __aenter__(self) -> FakeAniList:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    def _titles(self, media: MediaEntity) -> list[str]:
        return [title.casefold() for title in media.title_values(VerificationThresholds.TITLE_KEYS)]

    def _match(self, query: TitleQuery) -> MediaEntity | None:
        for media in self.entities.values():
            if media.is_adult != query.is_adult:
                continue
            if query.year and media.season_year != query.year:
                continue
            if query.title.casefold() in self._titles(media):
                return media
        return None

    async def search_compound(self, queries: Sequence[TitleQuery]) -> list[tuple[str, MediaEntity | None]]:
        self.compound_calls.append(list(queries))
        return [(query.key, self._match(query)) for query in queries]

    async def get_by_id(self, media_id: int) -> MediaEntity | None:
        self.id_calls.append(media_id)
        return self.entities.get(media_id)

    async def search(
        self,
        title: str,
        exclude_id: int | None = None,
        format_not_in: Sequence[str] | None = None,
    ) -> list[MediaEntity]:
        self.search_calls.append({"title": title, "exclude_id": exclude_id, "format_not_in": format_not_in})
        needle = title.casefold()
        excluded = set(format_not_in or ())
        return [
            media
            for media in self.entities.values()
            if media.id != exclude_id
            and getattr(media.format, "value", media.format) not in excluded
            and any(needle in candidate for candidate in self._titles(media))
        ]


@pytest.fixture
def aot_chain() -> list[MediaEntity]:
    """Three linked seasons: 25, 12 and 22 episodes."""
    return make_chain(
        ["Attack on Titan", "Attack on Titan Season 2", "Attack on Titan Season 3"],
        [25, 12, 22],
    )


@pytest.fixture
def statistics() -> StatisticsCollector:
    return StatisticsCollector()


@pytest.fixture
def fake_catalogue(aot_chain: list[MediaEntity]) -> FakeAniList:
    return FakeAniList(*aot_chain)


@pytest.fixture
def search_service(fake_catalogue: FakeAniList, statistics: StatisticsCollector) -> CatalogueSearchService:
    return CatalogueSearchService(fake_catalogue, ResolutionCache(), statistics=statistics)
