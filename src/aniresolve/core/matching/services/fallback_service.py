"""Manual search fallback for the resolver.

This module provides the ManualSearchService class: the last resort when
the batched title search and the season walk did not produce a verified
entity. It queries the catalogue directly by title and accepts the first
result that verifies.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aniresolve.core.matching.models import ManualSearchResult
from aniresolve.core.normalization import split_multi_title
from aniresolve.core.statistics import StatisticsCollector
from aniresolve.shared.constants import ManualSearchConfig

if TYPE_CHECKING:
    from aniresolve.core.matching.season_walker import SeasonWalker
    from aniresolve.core.matching.services.search_service import CatalogueSearchService
    from aniresolve.core.matching.verification import TitleVerifier
    from aniresolve.core.parser.models import ParsedName
    from aniresolve.shared.models.api.anilist import MediaEntity

logger = logging.getLogger(__name__)


class ManualSearchService:
    """Direct title search used after every other step failed.

    Attributes:
        search_service: Catalogue access
        walker: Season walker used to move a hit to the parsed season
        verifier: Title verification
        statistics: Statistics collector
        enabled: When False the fallback reports failure without searching

    Example:
        >>> service = ManualSearchService(search_service, walker, verifier)
        >>> result = await service.manual_media_search(parsed, rejected_media)
        >>> result.failed
        False
    """

    def __init__(
        self,
        search_service: CatalogueSearchService,
        walker: SeasonWalker,
        verifier: TitleVerifier,
        statistics: StatisticsCollector | None = None,
        enabled: bool = True,
    ) -> None:
        self.search_service = search_service
        self.walker = walker
        self.verifier = verifier
        self.statistics = statistics or StatisticsCollector()
        self.enabled = enabled

    async def manual_media_search(
        self,
        parsed: ParsedName,
        media: MediaEntity | None,
        threshold: float | None = None,
    ) -> ManualSearchResult:
        """Search the catalogue by title, skipping the rejected entity.

        Both halves of a "Main (Alt)" title are tried before the full
        title. With a season in the name, OVA results are excluded, and
        movies too above season 1; a verified hit is then moved along its
        chain to that season.

        Args:
            parsed: Parsed file name
            media: Entity already rejected, excluded from the search
            threshold: Verification threshold, scaled by title length if None

        Returns:
            The first verified hit, or ``media`` flagged as failed
        """
        if not self.enabled:
            return ManualSearchResult(media=media, failed=True)

        self.statistics.record_manual_search()
        logger.debug(
            "Attempting manual search for %s, ignoring %s:%s",
            parsed.anime_title,
            media.id if media else None,
            media.display_title if media else None,
        )

        titles = list(dict.fromkeys([*split_multi_title(parsed.anime_title), parsed.anime_title]))
        season = parsed.anime_season
        format_not_in: tuple[str, ...] | None = None
        if season:
            format_not_in = (
                ManualSearchConfig.EXCLUDED_FORMATS_LATER_SEASON if season > 1 else ManualSearchConfig.EXCLUDED_FORMATS
            )

        for title in titles:
            candidate_name = parsed.with_title(title)
            results = await self.search_service.search(
                title,
                exclude_id=media.id if media else None,
                format_not_in=format_not_in,
            )
            for candidate in results:
                if not self.verifier.is_verified(candidate, candidate_name, threshold):
                    continue
                logger.debug(
                    "Found %s:%s from manual search for %s",
                    candidate.id,
                    candidate.display_title,
                    parsed.anime_title,
                )
                if season:
                    candidate = await self.walker.resolve_by_season(candidate, season)
                return ManualSearchResult(media=candidate)

        return ManualSearchResult(media=media, failed=True)
