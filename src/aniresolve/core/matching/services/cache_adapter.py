"""Resolution cache for title and id lookups.

This module provides the process-lifetime memo the resolver owns: cache key
to entity (or to "searched, not found"), and an id arena of every fetched
entity. The resolver depends on the protocol only, so tests can swap in
their own implementation.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from aniresolve.shared.models.api.anilist import MediaEntity

logger = logging.getLogger(__name__)


class ResolutionCacheProtocol(Protocol):
    """Protocol for resolution cache implementations.

    Example:
        >>> cache: ResolutionCacheProtocol = ResolutionCache()
        >>> cache.record_title("Frieren", media)
        True
        >>> cache.get("Frieren").id
        154587
    """

    def __contains__(self, key: object) -> bool:
        """Whether ``key`` has been searched, found or not."""

    def get(self, key: str) -> MediaEntity | None:
        """Return the entity stored for a cache key, or None."""

    def record_title(self, key: str, media: MediaEntity | None) -> bool:
        """Store a search result under a cache key if the key is free.

        Returns:
            True if the value was stored, False if it was discarded
        """

    def get_media(self, media_id: int) -> MediaEntity | None:
        """Return a fetched entity by id."""

    def store_media(self, media: MediaEntity) -> None:
        """Put an entity into the id arena, replacing an older snapshot."""

    def clear(self) -> None:
        """Drop every entry."""


class ResolutionCache:
    """In-memory resolution cache.

    Title entries are write-once: the first entity stored for a key wins and
    later entities for the same key are logged and discarded. A key that
    was searched without a hit can still be filled by a later hit. The id
    arena always keeps the newest snapshot of an entity.

    Writes are guarded by a lock so concurrent resolvers sharing one cache
    insert-if-absent atomically.

    Lifecycle: entries live as long as the cache object; nothing expires
    mid-run.
    """

    def __init__(self) -> None:
        self._titles: dict[str, MediaEntity | None] = {}
        self._media: dict[int, MediaEntity] = {}
        self._lock = threading.Lock()

    def __contains__(self, key: object) -> bool:
        return key in self._titles

    def __len__(self) -> int:
        return len(self._titles)

    def get(self, key: str) -> MediaEntity | None:
        return self._titles.get(key)

    def record_title(self, key: str, media: MediaEntity | None) -> bool:
        with self._lock:
            existing = self._titles.get(key)
            if existing is None:
                if media is None and key in self._titles:
                    return False
                self._titles[key] = media
                if media is not None:
                    self._media[media.id] = media
                    logger.debug("Found %s as %s: %s", key, media.id, media.display_title)
                return True

        logger.debug(
            "Duplicate key found %s as %s: %s, skipping new value [%s: %s]",
            key,
            existing.id,
            existing.display_title,
            media.id if media else None,
            media.display_title if media else None,
        )
        return False

    def get_media(self, media_id: int) -> MediaEntity | None:
        return self._media.get(media_id)

    def store_media(self, media: MediaEntity) -> None:
        with self._lock:
            self._media[media.id] = media

    def clear(self) -> None:
        with self._lock:
            self._titles.clear()
            self._media.clear()
