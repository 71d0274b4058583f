"""Catalogue search service with cache integration.

This module provides the CatalogueSearchService class that sits between the
resolver and the catalogue client. It expands parsed names into title
queries, batches them under the AniList complexity budget, fills the
resolution cache, and turns client errors into empty results.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from aniresolve.core.normalization import alternative_titles, cache_key_for, normalize_title
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.shared.constants import AniListConfig
from aniresolve.shared.errors import AniResolveError, ErrorContext
from aniresolve.shared.logging import log_operation_error, log_operation_success
from aniresolve.shared.models.api.anilist import MediaEntity, TitleQuery
from aniresolve.shared.utils import chunked

if TYPE_CHECKING:
    from aniresolve.core.matching.services.cache_adapter import ResolutionCacheProtocol
    from aniresolve.core.parser.models import ParsedName
    from aniresolve.shared.protocols import CatalogueClientProtocol

logger = logging.getLogger(__name__)


class CatalogueSearchService:
    """Catalogue lookups backed by the resolution cache.

    Attributes:
        client: Catalogue client
        cache: Resolution cache the results are stored in
        statistics: Statistics collector for traffic counters
        chunk_size: Title queries per compound request

    Example:
        >>> service = CatalogueSearchService(AniListClient(), ResolutionCache())
        >>> await service.find_animes_by_title(tokenizer.parse(names))
        >>> media = await service.get_anime_by_id(16498)
    """

    def __init__(
        self,
        client: CatalogueClientProtocol,
        cache: ResolutionCacheProtocol,
        statistics: StatisticsCollector | None = None,
        chunk_size: int = AniListConfig.COMPOUND_CHUNK_SIZE,
        apply_corrections: bool = True,
    ) -> None:
        self.client = client
        self.cache = cache
        self.statistics = statistics or StatisticsCollector()
        self.chunk_size = chunk_size
        self.apply_corrections = apply_corrections

    def build_title_queries(self, parsed: ParsedName) -> list[TitleQuery]:
        """Expand one parsed name into its catalogue queries.

        Every alternative title yields, most specific first: title with
        release info, the same with the year filter, title with the year
        filter, and the bare title; variants whose field is missing are
        left out. An adult-content duplicate of the last query closes the
        list. A season above 1 is queried as " S{n}" on the title, which
        the alternative titles spell out as "2nd Season" and "Season 2".
        """
        key = cache_key_for(parsed)
        year = parsed.anime_year
        release_info = parsed.release_information
        titles = alternative_titles(normalize_title(parsed.search_title, apply_corrections=self.apply_corrections))

        queries: list[TitleQuery] = []
        for title in titles:
            if release_info:
                queries.append(TitleQuery(title=f"{title} {release_info}", key=key))
                if year:
                    queries.append(TitleQuery(title=f"{title} {release_info}", key=key, year=year))
            if year:
                queries.append(TitleQuery(title=title, key=key, year=year))
            queries.append(TitleQuery(title=title, key=key))

        if queries:
            last = queries[-1]
            queries.append(TitleQuery(title=last.title, key=key, year=last.year, is_adult=True))
        return queries

    async def find_animes_by_title(self, parsed_names: Sequence[ParsedName]) -> None:
        """Search the catalogue for every parsed name and fill the cache."""
        if not parsed_names:
            return
        queries = [query for parsed in parsed_names for query in self.build_title_queries(parsed)]
        logger.debug("Finding %d titles: %s", len(queries), ", ".join(query.title for query in queries))
        await self.find_by_titles(queries)

    async def find_by_titles(self, queries: Sequence[TitleQuery]) -> dict[str, MediaEntity | None]:
        """Run title queries in chunks and record the first hit per key.

        A chunk whose request fails is logged and skipped; keys that only
        appeared in it stay unsearched.

        Returns:
            Cache key to stored entity (or None) for every key answered
        """
        found: dict[str, MediaEntity | None] = {}
        start = time.perf_counter()

        for index, chunk in enumerate(chunked(list(queries), self.chunk_size)):
            try:
                results = await self.client.search_compound(chunk)
            except AniResolveError as e:
                self.statistics.record_api_call("search_compound", success=False)
                log_operation_error(
                    logger=logger,
                    error=e,
                    operation="find_by_titles",
                    additional_context=ErrorContext(
                        operation="find_by_titles",
                        additional_data={"chunk": index, "queries": len(chunk)},
                    ),
                )
                continue
            self.statistics.record_api_call("search_compound", success=True)

            for key, media in results:
                if not self.cache.record_title(key, media) and media is not None:
                    self.statistics.record_duplicate_key()
                found[key] = self.cache.get(key)

        log_operation_success(
            logger=logger,
            operation="find_by_titles",
            duration_ms=(time.perf_counter() - start) * 1000,
            result_info={"queries": len(queries), "keys": len(found)},
        )
        return found

    def lookup(self, parsed: ParsedName) -> MediaEntity | None:
        """Return the cached entity for a parsed name."""
        key = cache_key_for(parsed)
        media = self.cache.get(key)
        if media is None:
            self.statistics.record_cache_miss("title")
        else:
            self.statistics.record_cache_hit("title")
        return media

    async def get_anime_by_id(self, media_id: int) -> MediaEntity | None:
        """Fetch an entity by id through the id arena.

        Returns:
            The entity, or None if it does not exist or the request failed
        """
        cached = self.cache.get_media(media_id)
        if cached is not None:
            self.statistics.record_cache_hit("id")
            return cached
        self.statistics.record_cache_miss("id")

        try:
            media = await self.client.get_by_id(media_id)
        except AniResolveError as e:
            self.statistics.record_api_call("get_by_id", success=False)
            log_operation_error(
                logger=logger,
                error=e,
                operation="get_anime_by_id",
                additional_context={"media_id": media_id},
            )
            return None
        self.statistics.record_api_call("get_by_id", success=True)

        if media is not None:
            self.cache.store_media(media)
        return media

    async def search(
        self,
        title: str,
        exclude_id: int | None = None,
        format_not_in: Sequence[str] | None = None,
    ) -> list[MediaEntity]:
        """Paginated title search.

        Returns:
            Matching entities, empty on error
        """
        try:
            results = await self.client.search(title, exclude_id=exclude_id, format_not_in=format_not_in)
        except AniResolveError as e:
            self.statistics.record_api_call("search", success=False)
            log_operation_error(
                logger=logger,
                error=e,
                operation="search",
                additional_context={"title": title},
            )
            return []
        self.statistics.record_api_call("search", success=True)

        for media in results:
            self.cache.store_media(media)
        return results
