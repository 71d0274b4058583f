"""Resolution engine mapping release file names to AniList seasons.

This module provides the top-level resolver. For every file it looks up the
batched catalogue match, verifies it, places absolute episode numbers into
the right season through the season walker, and falls back to a manual
catalogue search when nothing verifies.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from aniresolve.config.models.resolver_settings import ResolverSettings
from aniresolve.core.matching.models import (
    EpisodeDescriptor,
    PrequelLookup,
    ResolutionResult,
    WalkOutcome,
)
from aniresolve.core.matching.season_walker import SeasonWalker, find_edge
from aniresolve.core.matching.services import (
    CatalogueSearchService,
    ManualSearchService,
    ResolutionCache,
    ResolutionCacheProtocol,
)
from aniresolve.core.matching.states import (
    ResolutionState,
    after_direct,
    after_manual_search,
    after_walk,
    initial_state,
    is_failed,
)
from aniresolve.core.matching.verification import TitleVerifier
from aniresolve.core.normalization import cache_key_for, clean_file_name, root_title
from aniresolve.core.parser import AnitopyParser, ParsedName
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.shared.constants import AniListConfig, EdgeFormats
from aniresolve.shared.errors import SeasonResolutionError
from aniresolve.shared.logging import log_operation_error
from aniresolve.shared.models.api.anilist import MediaEntity, MediaFormat, RelationType
from aniresolve.shared.protocols import CatalogueClientProtocol, TokenizerProtocol

logger = logging.getLogger(__name__)


class AnimeResolver:
    """Resolves release file names to catalogue entities and episodes.

    The resolver owns its resolution cache for its whole lifetime; pass a
    shared cache to reuse lookups across resolvers.

    Args:
        client: Catalogue client
        tokenizer: Release name tokenizer, AnitopyParser by default
        cache: Resolution cache, a fresh one by default
        settings: Verification and walk tuning
        chunk_size: Title queries per compound catalogue request
        statistics: Statistics collector

    Example:
        >>> async with AniListClient() as client:
        ...     resolver = AnimeResolver(client)
        ...     results = await resolver.resolve_file_anime("[Group] Frieren - 05.mkv")
    """

    def __init__(
        self,
        client: CatalogueClientProtocol,
        tokenizer: TokenizerProtocol | None = None,
        cache: ResolutionCacheProtocol | None = None,
        settings: ResolverSettings | None = None,
        chunk_size: int = AniListConfig.COMPOUND_CHUNK_SIZE,
        statistics: StatisticsCollector | None = None,
    ) -> None:
        self.settings = settings or ResolverSettings()
        self.tokenizer = tokenizer or AnitopyParser()
        self.cache = cache if cache is not None else ResolutionCache()
        self.statistics = statistics or StatisticsCollector()
        self.verifier = TitleVerifier(self.settings)

        self._search_service = CatalogueSearchService(
            client=client,
            cache=self.cache,
            statistics=self.statistics,
            chunk_size=chunk_size,
            apply_corrections=self.settings.title_corrections_enabled,
        )
        self._walker = SeasonWalker(self._search_service, self.settings.max_walk_depth)
        self._fallback_service = ManualSearchService(
            search_service=self._search_service,
            walker=self._walker,
            verifier=self.verifier,
            statistics=self.statistics,
            enabled=self.settings.manual_search_enabled,
        )

    @property
    def walker(self) -> SeasonWalker:
        return self._walker

    @property
    def search_service(self) -> CatalogueSearchService:
        return self._search_service

    async def find_and_cache_title(self, names: str | Sequence[str]) -> list[ParsedName]:
        """Tokenize names and search the catalogue for the unseen ones.

        Names whose cache key was already searched are not searched again,
        and neither are openings, endings and previews.

        Returns:
            Parsed names in input order, skipped ones included
        """
        parsed_names = self.tokenizer.parse([names] if isinstance(names, str) else list(names))

        pending: dict[str, ParsedName] = {}
        for parsed in parsed_names:
            key = cache_key_for(parsed)
            if key in self.cache:
                continue
            if parsed.is_excluded_type:
                logger.debug("Skipping non-episode media %s (%s)", parsed.file_name, parsed.anime_type)
                self.statistics.record_skipped()
                continue
            pending[key] = parsed

        await self._search_service.find_animes_by_title(list(pending.values()))
        return parsed_names

    async def resolve_file_anime(self, file_name: str | Sequence[str]) -> list[ResolutionResult]:
        """Resolve one release name or a batch of them.

        The catalogue search for the whole batch runs first; files are then
        resolved one after another against the filled cache.

        Args:
            file_name: A release file name or a sequence of them

        Returns:
            One ResolutionResult per input name, in input order
        """
        if not file_name:
            return []

        names = [file_name] if isinstance(file_name, str) else list(file_name)
        cleaned = clean_file_name(names, apply_corrections=self.settings.title_corrections_enabled)
        parsed_names = await self.find_and_cache_title(cleaned)

        results: list[ResolutionResult] = []
        for parsed in parsed_names:
            try:
                result = await self._resolve_one(parsed)
            except SeasonResolutionError as e:
                log_operation_error(
                    logger=logger,
                    error=e,
                    operation="resolve_file_anime",
                    additional_context={"file_name": parsed.file_name},
                )
                result = ResolutionResult(
                    file_name=parsed.file_name,
                    parsed=parsed,
                    media=None,
                    episode=_episode_descriptor(parsed.episode_number),
                    season=parsed.anime_season or 1,
                    failed=True,
                )
            self.statistics.record_result(result.failed)
            results.append(result)
        return results

    async def _resolve_one(self, parsed: ParsedName) -> ResolutionResult:
        media = self._search_service.lookup(parsed)
        threshold = self.verifier.threshold_for(parsed.anime_title)
        needs_verification = not self.verifier.is_verified(media, parsed, threshold)
        capacity = media.capacity if media else None

        logger.debug(
            "Resolving %s %s %s %s %s verified:%s",
            parsed.anime_title,
            parsed.episode_number,
            capacity,
            media.display_title if media else None,
            media.format if media else None,
            not needs_verification,
        )

        episode: EpisodeDescriptor | None = None
        state = ResolutionState.DIRECT
        has_episode = bool(parsed.episode_number) and (
            media is None or not media.format_is(MediaFormat.MOVIE.value) or bool(capacity)
        )

        if has_episode:
            offset = 0
            if not parsed.is_range and needs_verification:
                # Likely a badly named sequel; retry with the franchise title
                logger.debug("Media failed to resolve, attempting to fetch root media for %s", parsed.anime_title)
                refetched = await self.find_and_cache_title(root_title(parsed.anime_title))
                media = self._search_service.lookup(refetched[0])
                capacity = media.capacity if media else None
                offset = -((media.episodes or capacity) or 0) if media else 0

            state = initial_state(parsed, capacity, offset)
            if state is ResolutionState.NEEDS_WALK:
                outcome = await self._find_result(parsed, capacity or 0, offset, media, threshold)
                parsed = outcome.parsed
                media = outcome.media
                episode = outcome.episode
                state = after_walk(outcome)
            else:
                episode = _episode_descriptor(parsed.episode_number)
                state = after_direct(not needs_verification)
        elif needs_verification:
            state = ResolutionState.NEEDS_MANUAL_SEARCH

        if state is ResolutionState.NEEDS_MANUAL_SEARCH:
            manual = await self._fallback_service.manual_media_search(parsed, media, threshold)
            media = manual.media
            state = after_manual_search(manual)

        failed = is_failed(state, media)
        if episode is None:
            episode = _episode_descriptor(parsed.episode_number)

        season: int | None = parsed.anime_season or 1
        if media is not None and media.format_is(MediaFormat.MOVIE.value) and not parsed.anime_season:
            season = None

        logger.debug(
            "%s %s %s %s %s:%s",
            "Failed to resolve" if failed else "Resolved",
            parsed.anime_title,
            parsed.episode_number,
            episode,
            media.id if media else None,
            media.display_title if media else None,
        )
        return ResolutionResult(
            file_name=parsed.file_name,
            parsed=parsed,
            media=media,
            episode=episode,
            season=season,
            failed=failed,
        )

    async def _find_result(
        self,
        parsed: ParsedName,
        capacity: int,
        offset: int,
        media: MediaEntity | None,
        threshold: float,
    ) -> WalkOutcome:
        """Walk an out-of-range episode to the season that owns it."""
        if media is None:
            return WalkOutcome(parsed=parsed, media=None, needs_manual_search=True)

        self.statistics.record_season_walk()
        prequel = await self._find_prequel(parsed, offset, media, threshold)
        walk = prequel.result

        if walk.failed:
            handled = await self._handle_episode(parsed, capacity, offset, media, prequel, threshold)
            if not handled.failed:
                return handled
            # The manual search already ran and failed; keep the best guess
            if self.verifier.is_verified(walk.root_media, parsed, threshold):
                return WalkOutcome(
                    parsed=parsed,
                    media=walk.root_media,
                    episode=self._walk_episode(parsed, walk.episode, walk.failed),
                    failed=True,
                )
            return handled

        if self.verifier.is_verified(walk.root_media, parsed, threshold):
            logger.debug(
                "Found root media for %s: %s:%s from %s:%s",
                parsed.anime_title,
                walk.root_media.id,
                walk.root_media.display_title,
                media.id,
                media.display_title,
            )
            return WalkOutcome(
                parsed=parsed,
                media=walk.root_media,
                episode=self._walk_episode(parsed, walk.episode, walk.failed),
            )
        return WalkOutcome(parsed=parsed, media=media, needs_manual_search=True)

    async def _find_prequel(
        self,
        parsed: ParsedName,
        offset: int,
        media: MediaEntity,
        threshold: float,
    ) -> PrequelLookup:
        """Locate the franchise root and walk the parsed episode from it.

        Only names without a season marker look for a prequel (or, for OVA
        and ONA entries, a parent). When the chain found that way does not
        verify against the parsed title, the matched entity is taken as the
        root.
        """
        root: MediaEntity | None = None
        if not parsed.anime_season:
            edge = find_edge(media, RelationType.PREQUEL)
            if edge is None and media.format_is(*EdgeFormats.PARENT_SOURCES):
                edge = find_edge(media, RelationType.PARENT)
            if edge is not None:
                prequel = await self._search_service.get_anime_by_id(edge.node.id)
                if prequel is not None:
                    root = (await self._walker.resolve_season(prequel, force=True, offset=offset)).media
                logger.debug("Root %s:%s", root.id if root else None, root.display_title if root else None)

        is_root = root is None or not self.verifier.is_verified(root, parsed, threshold)
        if is_root:
            logger.debug(
                "Assuming %s:%s is already the root for %s",
                media.id,
                media.display_title,
                parsed.anime_title,
            )

        episode = parsed.episode_upper
        if not parsed.anime_season and not is_root and root is not None:
            result = await self._walker.resolve_season(root, episode, increment=None, offset=0)
        else:
            result = await self._walker.resolve_season(media, episode, increment=True, offset=offset)
        return PrequelLookup(result=result, is_root=is_root, root=root)

    async def _handle_episode(
        self,
        parsed: ParsedName,
        capacity: int,
        offset: int,
        media: MediaEntity,
        prequel: PrequelLookup,
        threshold: float,
    ) -> WalkOutcome:
        """Last attempts after a failed walk, ending in a manual search."""
        logger.debug(
            "Attempting last ditch effort for failed result %s: %s:%s",
            parsed.anime_title,
            media.id,
            media.display_title,
        )
        episode_number = parsed.episode_upper or 0

        if parsed.anime_season:
            start = prequel.root if not prequel.is_root and prequel.root else media
            result = await self._walker.resolve_season(start, episode_number, offset=offset)
            if not result.failed:
                return WalkOutcome(
                    parsed=parsed,
                    media=result.media,
                    episode=self._walk_episode(parsed, result.episode, False),
                )

        if episode_number > capacity or episode_number < 0:
            # The number may belong to the title, e.g. "Mob Psycho 100 - 05"
            logger.debug(
                "Episode %s is out of range for %s (max %s), re-tokenizing the title",
                episode_number,
                parsed.anime_title,
                capacity,
            )
            reparsed = (await self.find_and_cache_title(root_title(parsed.anime_title)))[0]
            reparsed_media = self._search_service.lookup(reparsed)
            reparsed_episode = reparsed.episode_number
            if (
                isinstance(reparsed_episode, int)
                and reparsed_episode < capacity
                and self.verifier.is_verified(reparsed_media, reparsed, threshold)
            ):
                return WalkOutcome(parsed=reparsed, media=reparsed_media, episode=reparsed_episode)

        manual = await self._fallback_service.manual_media_search(parsed, media, threshold)
        return WalkOutcome(parsed=parsed, media=manual.media, failed=manual.failed)

    @staticmethod
    def _walk_episode(parsed: ParsedName, walked: int | None, walk_failed: bool) -> EpisodeDescriptor | None:
        """Express a walked episode in the shape of the parsed one."""
        if isinstance(parsed.episode_number, tuple):
            start, end = parsed.episode_number
            if walked is None:
                return _episode_descriptor(parsed.episode_number)
            return f"{start - (end - walked)} ~ {walked}"
        if walk_failed and walked != parsed.episode_number:
            return parsed.episode_number
        return walked


def _episode_descriptor(episode: int | tuple[int, int] | None) -> EpisodeDescriptor | None:
    if isinstance(episode, tuple):
        return f"{episode[0]} ~ {episode[1]}"
    return episode
