"""Tests for CatalogueSearchService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from conftest import FakeAniList, make_media

from aniresolve.core.matching.services import CatalogueSearchService, ResolutionCache
from aniresolve.core.parser import ParsedName
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.shared.errors import AniResolveNetworkError, ErrorCode
from aniresolve.shared.models.api.anilist import TitleQuery


class TestBuildTitleQueries:
    """Query expansion for one parsed name."""

    def test_variant_order(self) -> None:
        service = CatalogueSearchService(FakeAniList(), ResolutionCache())
        parsed = ParsedName(anime_title="Frieren", anime_year=2023, release_information="Batch")

        queries = service.build_title_queries(parsed)

        assert [(query.title, query.year, query.is_adult) for query in queries] == [
            ("Frieren Batch", None, False),
            ("Frieren Batch", 2023, False),
            ("Frieren", 2023, False),
            ("Frieren", None, False),
            ("Frieren", None, True),
        ]
        assert {query.key for query in queries} == {"Frieren2023Batch"}

    def test_season_alternatives(self) -> None:
        service = CatalogueSearchService(FakeAniList(), ResolutionCache())

        queries = service.build_title_queries(ParsedName(anime_title="Attack on Titan S2", anime_season=2))

        assert [query.title for query in queries] == [
            "Attack on Titan 2nd Season",
            "Attack on Titan Season 2",
            "Attack on Titan Season 2",
        ]
        assert queries[-1].is_adult

    def test_season_lifted_out_of_title_is_queried(self) -> None:
        service = CatalogueSearchService(FakeAniList(), ResolutionCache())

        queries = service.build_title_queries(ParsedName(anime_title="Attack on Titan", anime_season=2))

        assert [query.title for query in queries][:2] == [
            "Attack on Titan 2nd Season",
            "Attack on Titan Season 2",
        ]
        assert {query.key for query in queries} == {"Attack on Titan S2"}

    def test_first_season_queries_bare_title(self) -> None:
        service = CatalogueSearchService(FakeAniList(), ResolutionCache())

        queries = service.build_title_queries(ParsedName(anime_title="Attack on Titan", anime_season=1))

        assert [query.title for query in queries] == ["Attack on Titan", "Attack on Titan"]
        assert queries[0].key == "Attack on Titan"

    def test_corrections_follow_the_setting(self) -> None:
        parsed = ParsedName(anime_title="New Prince of Tennis")

        corrected = CatalogueSearchService(FakeAniList(), ResolutionCache()).build_title_queries(parsed)
        verbatim = CatalogueSearchService(FakeAniList(), ResolutionCache(), apply_corrections=False).build_title_queries(
            parsed
        )

        assert corrected[0].title == "Prince of Tennis"
        assert verbatim[0].title == "New Prince of Tennis"


class TestFindByTitles:
    """Chunked compound searches."""

    @pytest.mark.asyncio
    async def test_requests_are_chunked(self) -> None:
        catalogue = FakeAniList()
        service = CatalogueSearchService(catalogue, ResolutionCache(), chunk_size=2)
        queries = [TitleQuery(title=f"Show {index}", key=f"Show {index}") for index in range(5)]

        await service.find_by_titles(queries)

        assert [len(call) for call in catalogue.compound_calls] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_failed_chunk_is_skipped(self) -> None:
        media = make_media(1, "Show B")
        client = AsyncMock()
        client.search_compound.side_effect = [
            AniResolveNetworkError(ErrorCode.API_SERVER_ERROR, "AniList responded with HTTP 503"),
            [("Show B", media)],
        ]
        statistics = StatisticsCollector()
        cache = ResolutionCache()
        service = CatalogueSearchService(client, cache, statistics=statistics, chunk_size=1)

        found = await service.find_by_titles([TitleQuery("Show A", "Show A"), TitleQuery("Show B", "Show B")])

        assert found == {"Show B": media}
        assert "Show A" not in cache
        assert statistics.metrics.api_calls == 2
        assert statistics.metrics.api_errors == 1

    @pytest.mark.asyncio
    async def test_duplicate_hits_are_counted(self) -> None:
        first = make_media(1, "Show")
        second = make_media(2, "Show")
        client = AsyncMock()
        client.search_compound.return_value = [("Show", first), ("Show", second), ("Show", None)]
        statistics = StatisticsCollector()
        cache = ResolutionCache()
        service = CatalogueSearchService(client, cache, statistics=statistics)

        found = await service.find_by_titles([TitleQuery("Show", "Show")] * 3)

        assert found["Show"].id == 1
        assert statistics.metrics.duplicate_keys == 1

    @pytest.mark.asyncio
    async def test_find_animes_by_title_fills_cache(self, search_service, fake_catalogue) -> None:
        parsed = ParsedName(anime_title="Attack on Titan", episode_number=5)

        await search_service.find_animes_by_title([parsed])

        assert search_service.lookup(parsed).id == 1
        assert len(fake_catalogue.compound_calls) == 1

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_request(self, search_service, fake_catalogue) -> None:
        await search_service.find_animes_by_title([])

        assert fake_catalogue.compound_calls == []


class TestLookups:
    """Cache lookups, id fetches and manual searches."""

    def test_lookup_records_hits_and_misses(self, search_service, statistics) -> None:
        search_service.cache.record_title("Show", make_media(1, "Show"))

        assert search_service.lookup(ParsedName(anime_title="Show")).id == 1
        assert search_service.lookup(ParsedName(anime_title="Other")) is None
        assert statistics.metrics.cache_hits == 1
        assert statistics.metrics.cache_misses == 1

    @pytest.mark.asyncio
    async def test_get_anime_by_id_uses_arena(self, search_service, fake_catalogue) -> None:
        first = await search_service.get_anime_by_id(2)
        second = await search_service.get_anime_by_id(2)

        assert first is second
        assert fake_catalogue.id_calls == [2]

    @pytest.mark.asyncio
    async def test_get_anime_by_id_error_returns_none(self) -> None:
        client = AsyncMock()
        client.get_by_id.side_effect = AniResolveNetworkError(ErrorCode.NETWORK_ERROR, "connection refused")
        statistics = StatisticsCollector()
        service = CatalogueSearchService(client, ResolutionCache(), statistics=statistics)

        assert await service.get_anime_by_id(1) is None
        assert statistics.metrics.api_errors == 1

    @pytest.mark.asyncio
    async def test_search_error_returns_empty(self) -> None:
        client = AsyncMock()
        client.search.side_effect = AniResolveNetworkError(ErrorCode.API_TIMEOUT, "timed out")
        service = CatalogueSearchService(client, ResolutionCache())

        assert await service.search("Show") == []

    @pytest.mark.asyncio
    async def test_search_results_enter_arena(self, search_service) -> None:
        results = await search_service.search("Attack on Titan", exclude_id=1)

        assert [media.id for media in results] == [2, 3]
        assert search_service.cache.get_media(3) is not None
