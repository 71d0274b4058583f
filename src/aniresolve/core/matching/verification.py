"""Fuzzy verification of catalogue matches.

A candidate entity is accepted without a fallback search only if one of its
title fields is close to the parsed title. Distances are on a 0..1 scale
where 0 is identical; a match needs ``distance <= threshold``.

The distance is the smaller of two scores computed with rapidfuzz on
accent-stripped, case-folded text:

* a located substring score: ``1 - partial_ratio/100`` plus a penalty of
  ``start / location_distance`` for how far into the title the match
  starts (only when the query is not longer than the title)
* a token-order-insensitive score: ``1 - token_sort_ratio/100``
"""

from __future__ import annotations

import functools
import logging
import re
import unicodedata

from rapidfuzz import fuzz, utils

from aniresolve.config.models.resolver_settings import ResolverSettings
from aniresolve.core.normalization import strip_season_markers
from aniresolve.core.parser.models import ParsedName
from aniresolve.shared.constants import VerificationThresholds
from aniresolve.shared.models.api.anilist import MediaEntity

logger = logging.getLogger(__name__)

# Season encoded in an entity title: "Season 2", "2nd Season", "S2"
_ENTITY_SEASON_PATTERN = re.compile(
    r"\bseason\b|\b\d+(?:st|nd|rd|th)\s+season\b|\bs\d+\b",
    re.IGNORECASE,
)
_WHITESPACE_PATTERN = re.compile(r"\s+")


@functools.lru_cache(maxsize=4096)
def _prepare(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return utils.default_process(stripped)


def title_distance(
    query: str,
    text: str,
    location_distance: int = VerificationThresholds.LOCATION_DISTANCE,
) -> float:
    """Distance between a query and one title, 0.0 (same) to 1.0 (unrelated).

    Examples:
        >>> title_distance("Frieren", "Frieren: Beyond Journey's End")
        0.0
    """
    query_p = _prepare(query)
    text_p = _prepare(text)
    if not query_p or not text_p:
        return 1.0

    full = 1.0 - fuzz.token_sort_ratio(query_p, text_p) / 100.0
    if len(query_p) > len(text_p):
        return full

    alignment = fuzz.partial_ratio_alignment(query_p, text_p)
    if alignment is None:
        return full
    partial = 1.0 - alignment.score / 100.0 + alignment.dest_start / location_distance
    return min(partial, full)


def match_keys(
    media: MediaEntity,
    query: str,
    title_keys: tuple[str, ...],
    threshold: float,
    location_distance: int = VerificationThresholds.LOCATION_DISTANCE,
) -> bool:
    """Whether any title named by ``title_keys`` is within ``threshold`` of ``query``."""
    if not query:
        return False
    return any(
        title_distance(query, title, location_distance) <= threshold
        for title in media.title_values(title_keys)
    )


def entity_has_season(media: MediaEntity, title_keys: tuple[str, ...]) -> bool:
    """Whether the entity's own titles encode a season number."""
    return any(_ENTITY_SEASON_PATTERN.search(title) for title in media.title_values(title_keys))


def threshold_for_title(title: str, settings: ResolverSettings | None = None) -> float:
    """Scale the distance threshold with title length; short titles are stricter."""
    settings = settings or ResolverSettings()
    length = len(title or "")
    if length > settings.long_title_length:
        return settings.long_title_threshold
    if length > settings.medium_title_length:
        return settings.medium_title_threshold
    return settings.short_title_threshold


def _join(*parts: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", " ".join(parts)).strip()


def is_verified(
    media: MediaEntity | None,
    parsed: ParsedName,
    title_keys: tuple[str, ...] = VerificationThresholds.TITLE_KEYS,
    threshold: float = VerificationThresholds.SHORT,
    *,
    season_retry_threshold: float = VerificationThresholds.SEASON_RETRY,
    location_distance: int = VerificationThresholds.LOCATION_DISTANCE,
) -> bool:
    """Decide whether ``media`` plausibly is the anime ``parsed`` names.

    Fails when the parsed year is later than the entity's season year.
    Otherwise one of these queries has to match a title field:

    1. the parsed title, or, for a season above 1 when the entity titles
       carry a season, the title with season markers replaced by
       "Season N"
    2. the title without season markers, plus "Season N" when the entity
       carries a season
    3. for a season above 1, the markers rewritten in place to
       "Season N", at the looser ``season_retry_threshold``
    """
    if media is None:
        return False

    if parsed.anime_year and (media.season_year is None or media.season_year < parsed.anime_year):
        return False

    title = parsed.anime_title
    season = parsed.anime_season
    later_season = bool(season and season > 1)
    has_season = entity_has_season(media, title_keys)
    stripped = strip_season_markers(title)

    def _matches(query: str, limit: float) -> bool:
        return match_keys(media, query, title_keys, limit, location_distance)

    primary = _join(stripped, f"Season {season}") if later_season and has_season else title
    if _matches(primary, threshold):
        return True

    secondary = _join(stripped, f"Season {season}") if has_season and season else _join(stripped)
    if _matches(secondary, threshold):
        return True

    if later_season:
        rewritten = re.sub(
            r"S\d+|season-\d+",
            f"Season {season}",
            title,
            flags=re.IGNORECASE,
        )
        if _matches(rewritten, season_retry_threshold):
            logger.debug("Verified %s against %s on season retry", title, media.id)
            return True

    return False


class TitleVerifier:
    """Verification bound to configured thresholds and title keys.

    Example:
        >>> verifier = TitleVerifier()
        >>> threshold = verifier.threshold_for("Attack on Titan S2")
        >>> verifier.is_verified(media, parsed, threshold)
    """

    def __init__(
        self,
        settings: ResolverSettings | None = None,
        title_keys: tuple[str, ...] = VerificationThresholds.TITLE_KEYS,
    ) -> None:
        self.settings = settings or ResolverSettings()
        self.title_keys = title_keys

    def threshold_for(self, title: str) -> float:
        return threshold_for_title(title, self.settings)

    def is_verified(
        self,
        media: MediaEntity | None,
        parsed: ParsedName,
        threshold: float | None = None,
    ) -> bool:
        """Verify ``media`` against ``parsed`` with the configured thresholds."""
        if threshold is None:
            threshold = self.threshold_for(parsed.anime_title)
        return is_verified(
            media,
            parsed,
            self.title_keys,
            threshold,
            season_retry_threshold=self.settings.season_retry_threshold,
            location_distance=self.settings.location_distance,
        )
