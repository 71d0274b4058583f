"""Season walker over AniList relation edges.

Converts an absolute episode index into a (season entity, relative
episode) pair by following PREQUEL/SEQUEL edges, and locates the root or
the tip of a franchise chain. Entities are fetched by id through the
search service, which keeps them in the id arena of the resolution cache,
so the walk never holds live references between entities.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aniresolve.core.matching.models import SeasonWalkResult
from aniresolve.shared.constants import EdgeFormats, SeasonWalkConfig
from aniresolve.shared.errors import ErrorCode, ErrorContext, SeasonResolutionError
from aniresolve.shared.models.api.anilist import MediaEntity, RelationEdge, RelationType

if TYPE_CHECKING:
    from aniresolve.core.matching.services.search_service import CatalogueSearchService

logger = logging.getLogger(__name__)


def find_edge(
    media: MediaEntity,
    relation: RelationType,
    formats: tuple[str, ...] = EdgeFormats.DEFAULT,
    *,
    skip_fallback: bool = False,
) -> RelationEdge | None:
    """Return the first ``relation`` edge whose target format is in ``formats``.

    A SEQUEL lookup that finds nothing is retried once with OVA targets
    allowed.
    """
    for edge in media.edges_of(relation):
        if _format_value(edge.node.format) in formats:
            return edge
    if not skip_fallback and relation is RelationType.SEQUEL:
        return find_edge(media, relation, EdgeFormats.SEQUEL_FALLBACK, skip_fallback=True)
    return None


def parent_for_special(media: MediaEntity) -> int | None:
    """Return the id of the main series a special, OVA or ONA belongs to.

    Only ANIME nodes are considered; PARENT wins over PREQUEL, which wins
    over SEQUEL.
    """
    if not media.format_is(*EdgeFormats.SPECIALS):
        return None
    anime_edges = [edge for edge in media.edges if edge.node.type == "ANIME"]
    for relation in (RelationType.PARENT, RelationType.PREQUEL, RelationType.SEQUEL):
        for edge in anime_edges:
            if _format_value(edge.relation_type) == relation.value:
                return edge.node.id
    return None


def _format_value(value: object) -> object:
    return getattr(value, "value", value)


class SeasonWalker:
    """Walks prequel/sequel chains to place an absolute episode.

    Args:
        search_service: Source of entities by id
        max_depth: Relation hops followed before a walk is given up
    """

    def __init__(
        self,
        search_service: CatalogueSearchService,
        max_depth: int = SeasonWalkConfig.MAX_DEPTH,
    ) -> None:
        self.search_service = search_service
        self.max_depth = max_depth

    find_edge = staticmethod(find_edge)

    async def resolve_season(
        self,
        media: MediaEntity | None,
        episode: int | None = None,
        *,
        force: bool = False,
        increment: bool | None = None,
        offset: int = 0,
        root_media: MediaEntity | None = None,
    ) -> SeasonWalkResult:
        """Find the entity in the chain that owns ``episode``.

        Without ``increment`` the walk goes backward along PREQUEL edges when
        the starting entity has one, forward along SEQUEL edges otherwise,
        and keeps that direction to the end. Each hop adds a capacity to
        ``offset``: the neighbour's when walking backward, the previous
        entity's when walking forward. The walk stops once the episode fits
        into the entity it reached, or, with ``force``, only at the end of
        the chain.

        Args:
            media: Entity to start from
            episode: Absolute episode index
            force: Walk to the end of the chain regardless of the episode
            increment: Fixed direction, True for forward
            offset: Episodes already accounted for before ``media``
            root_media: Entity whose capacity bounds the remaining distance

        Returns:
            The walk result; ``failed`` when the chain ended or the depth
            bound was hit before the episode fitted

        Raises:
            SeasonResolutionError: If media is missing, or neither an
                episode nor ``force`` is given
        """
        if media is None or not (episode or force):
            raise SeasonResolutionError(
                ErrorCode.CONTRACT_VIOLATION,
                "No episode or media for season resolve",
                ErrorContext(
                    operation="resolve_season",
                    additional_data={
                        "media_id": media.id if media else None,
                        "episode": episode,
                        "force": force,
                    },
                ),
            )

        root_media = root_media or media

        # An episode that already fits the starting entity needs no hop
        capacity = media.capacity
        if not force and offset == 0 and episode and capacity and 1 <= episode <= capacity:
            return SeasonWalkResult(
                media=media,
                episode=episode,
                offset=0,
                increment=True if increment is None else increment,
                root_media=root_media,
            )

        for _hop in range(self.max_depth + 1):
            root_highest = root_media.capacity

            prequel = None if increment else find_edge(media, RelationType.PREQUEL)
            sequel = None
            if prequel is None and increment is not False:
                sequel = find_edge(media, RelationType.SEQUEL)
            edge = prequel or sequel
            if increment is None:
                increment = prequel is None

            if edge is None:
                if not force:
                    logger.debug(
                        "Failed to resolve season %s:%s episode=%s increment=%s offset=%s root=%s",
                        media.id,
                        media.display_title,
                        episode,
                        increment,
                        offset,
                        root_media.id,
                    )
                return self._failed(media, episode, offset, increment, root_media)

            neighbour = await self.search_service.get_anime_by_id(edge.node.id)
            if neighbour is None:
                logger.debug("Relation target %s of %s could not be fetched", edge.node.id, media.id)
                return self._failed(media, episode, offset, increment, root_media)

            media = neighbour
            highest = media.capacity
            previous_offset = offset
            offset += (root_highest or 0) if increment else (highest or 0)
            if increment:
                root_media = media

            logger.debug(
                "Walked %s to %s:%s (offset=%s)",
                "forward" if increment else "backward",
                media.id,
                media.display_title,
                offset,
            )

            if force or episode is None or highest is None or root_highest is None:
                continue
            if episode - (highest + previous_offset) <= root_highest:
                return SeasonWalkResult(
                    media=media,
                    episode=episode - offset,
                    offset=offset,
                    increment=increment,
                    root_media=root_media,
                )

        logger.warning(
            "Season walk from %s exceeded %d hops, relation graph likely has a cycle",
            root_media.id,
            self.max_depth,
        )
        return self._failed(media, episode, offset, bool(increment), root_media)

    async def resolve_by_season(self, media: MediaEntity, season: int | None) -> MediaEntity:
        """Walk to the entity for a season index.

        Goes back to the root along PREQUEL edges, then forward along
        SEQUEL edges counting the root as season 1. Stops early at the end
        of the chain.
        """
        if not season:
            return media

        for _hop in range(self.max_depth):
            edge = find_edge(media, RelationType.PREQUEL)
            if edge is None:
                break
            prequel = await self.search_service.get_anime_by_id(edge.node.id)
            if prequel is None:
                break
            media = prequel

        number = 1
        for _hop in range(self.max_depth):
            if number == season:
                break
            edge = find_edge(media, RelationType.SEQUEL)
            if edge is None:
                break
            sequel = await self.search_service.get_anime_by_id(edge.node.id)
            if sequel is None:
                break
            media = sequel
            number += 1

        logger.debug("Season %s resolved to %s:%s", season, media.id, media.display_title)
        return media

    @staticmethod
    def _failed(
        media: MediaEntity,
        episode: int | None,
        offset: int,
        increment: bool,
        root_media: MediaEntity,
    ) -> SeasonWalkResult:
        return SeasonWalkResult(
            media=media,
            episode=episode - offset if episode is not None else None,
            offset=offset,
            increment=increment,
            root_media=root_media,
            failed=True,
        )
