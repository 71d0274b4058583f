"""Service protocols for dependency inversion.

The resolver talks to the catalogue and to the filename tokenizer only
through these interfaces, so tests can substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, overload

if TYPE_CHECKING:
    from aniresolve.core.parser.models import ParsedName
    from aniresolve.shared.models.api.anilist import MediaEntity, TitleQuery


class CatalogueClientProtocol(Protocol):
    """Protocol for the anime catalogue client.

    Example:
        >>> from aniresolve.services.anilist import AniListClient
        >>> client: CatalogueClientProtocol = AniListClient()
        >>> media = await client.get_by_id(16498)
    """

    async def search_compound(
        self,
        queries: Sequence[TitleQuery],
    ) -> list[tuple[str, MediaEntity | None]]:
        """Run many title searches in one request.

        Args:
            queries: Title searches, one per alias

        Returns:
            (cache key, first hit or None) pairs in query order
        """

    async def get_by_id(self, media_id: int) -> MediaEntity | None:
        """Fetch a single entity by id.

        Args:
            media_id: Catalogue id

        Returns:
            The entity, or None if the catalogue has no such id
        """

    async def search(
        self,
        title: str,
        exclude_id: int | None = None,
        format_not_in: Sequence[str] | None = None,
    ) -> list[MediaEntity]:
        """Search the catalogue by title.

        Args:
            title: Search string
            exclude_id: Entity id to leave out of the results
            format_not_in: Formats to leave out of the results

        Returns:
            Matching entities in catalogue relevance order
        """


class TokenizerProtocol(Protocol):
    """Protocol for release file name tokenizers."""

    @overload
    def parse(self, names: str) -> ParsedName: ...

    @overload
    def parse(self, names: Sequence[str]) -> list[ParsedName]: ...

    def parse(self, names: str | Sequence[str]) -> ParsedName | list[ParsedName]:
        """Split one or many release names into structured fields."""
