"""
Statistics Collection Module

Counters for catalogue traffic and resolution outcomes, collected per
resolver instance and reported by the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ResolutionMetrics:
    """Container for resolution metrics."""

    # Outcome metrics
    total_files: int = 0
    resolved_files: int = 0
    failed_files: int = 0
    skipped_files: int = 0

    # Cache metrics
    cache_hits: int = 0
    cache_misses: int = 0
    duplicate_keys: int = 0

    # Catalogue metrics
    api_calls: int = 0
    api_errors: int = 0

    # Path metrics
    season_walks: int = 0
    manual_searches: int = 0


class StatisticsCollector:
    """Central aggregator for resolution metrics."""

    def __init__(self) -> None:
        self.metrics = ResolutionMetrics()

    def record_cache_hit(self, cache_type: str) -> None:
        """Record a cache hit for ``cache_type`` ("title" or "id")."""
        self.metrics.cache_hits += 1
        logger.debug("Recorded cache hit for type: %s", cache_type)

    def record_cache_miss(self, cache_type: str) -> None:
        """Record a cache miss for ``cache_type`` ("title" or "id")."""
        self.metrics.cache_misses += 1
        logger.debug("Recorded cache miss for type: %s", cache_type)

    def record_duplicate_key(self) -> None:
        self.metrics.duplicate_keys += 1

    def record_api_call(self, endpoint: str, success: bool) -> None:
        """Record a catalogue call.

        Args:
            endpoint: Client method called
            success: Whether the call was successful
        """
        self.metrics.api_calls += 1
        if not success:
            self.metrics.api_errors += 1
        logger.debug("Recorded API call: %s, success=%s", endpoint, success)

    def record_season_walk(self) -> None:
        self.metrics.season_walks += 1

    def record_manual_search(self) -> None:
        self.metrics.manual_searches += 1

    def record_skipped(self) -> None:
        self.metrics.skipped_files += 1

    def record_result(self, failed: bool) -> None:
        """Record the outcome of one file."""
        self.metrics.total_files += 1
        if failed:
            self.metrics.failed_files += 1
        else:
            self.metrics.resolved_files += 1

    def get_cache_hit_ratio(self) -> float:
        """Get the cache hit ratio as a percentage (0.0 to 100.0)."""
        total_requests = self.metrics.cache_hits + self.metrics.cache_misses
        if total_requests == 0:
            return 0.0
        return (self.metrics.cache_hits / total_requests) * 100.0

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of all collected statistics."""
        summary = asdict(self.metrics)
        summary["cache_hit_ratio"] = self.get_cache_hit_ratio()
        return summary

    def reset(self) -> None:
        """Reset all collected statistics."""
        self.metrics = ResolutionMetrics()
