"""Tests for ResolutionCache."""

from __future__ import annotations

import threading

from conftest import make_media

from aniresolve.core.matching.services import ResolutionCache


class TestResolutionCache:
    """Write-once title entries and the id arena."""

    def test_first_entity_wins(self) -> None:
        cache = ResolutionCache()
        first = make_media(1, "Show")
        second = make_media(2, "Show Again")

        assert cache.record_title("Show", first) is True
        assert cache.record_title("Show", second) is False
        assert cache.get("Show").id == 1

    def test_absence_is_upgraded_by_a_hit(self) -> None:
        cache = ResolutionCache()
        media = make_media(1, "Show")

        assert cache.record_title("Show", None) is True
        assert "Show" in cache
        assert cache.get("Show") is None

        assert cache.record_title("Show", media) is True
        assert cache.get("Show").id == 1

    def test_absence_does_not_replace_a_hit(self) -> None:
        cache = ResolutionCache()
        cache.record_title("Show", make_media(1, "Show"))

        assert cache.record_title("Show", None) is False
        assert cache.get("Show").id == 1

    def test_repeated_absence_is_discarded(self) -> None:
        cache = ResolutionCache()

        assert cache.record_title("Show", None) is True
        assert cache.record_title("Show", None) is False
        assert len(cache) == 1

    def test_title_hits_fill_the_arena(self) -> None:
        cache = ResolutionCache()
        cache.record_title("Show", make_media(7, "Show"))

        assert cache.get_media(7).id == 7

    def test_arena_keeps_newest_snapshot(self) -> None:
        cache = ResolutionCache()
        cache.store_media(make_media(7, "Show", 12))
        cache.store_media(make_media(7, "Show", 24))

        assert cache.get_media(7).episodes == 24

    def test_clear(self) -> None:
        cache = ResolutionCache()
        cache.record_title("Show", make_media(1, "Show"))
        cache.clear()

        assert "Show" not in cache
        assert cache.get_media(1) is None

    def test_concurrent_writers_store_one_value(self) -> None:
        cache = ResolutionCache()
        stored: list[bool] = []
        lock = threading.Lock()

        def _writer(media_id: int) -> None:
            result = cache.record_title("Show", make_media(media_id, "Show"))
            with lock:
                stored.append(result)

        threads = [threading.Thread(target=_writer, args=(media_id,)) for media_id in range(1, 11)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stored.count(True) == 1
        assert cache.get("Show") is not None
