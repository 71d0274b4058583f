"""Tests for the statistics collector."""

from aniresolve.core.statistics import StatisticsCollector


class TestStatisticsCollector:
    """Counter aggregation."""

    def test_initial_state(self):
        collector = StatisticsCollector()

        summary = collector.get_summary()

        assert summary["total_files"] == 0
        assert summary["cache_hit_ratio"] == 0.0

    def test_results(self):
        collector = StatisticsCollector()
        collector.record_result(failed=False)
        collector.record_result(failed=False)
        collector.record_result(failed=True)
        collector.record_skipped()

        metrics = collector.metrics
        assert metrics.total_files == 3
        assert metrics.resolved_files == 2
        assert metrics.failed_files == 1
        assert metrics.skipped_files == 1

    def test_cache_hit_ratio(self):
        collector = StatisticsCollector()
        for _ in range(3):
            collector.record_cache_hit("title")
        collector.record_cache_miss("id")

        assert collector.get_cache_hit_ratio() == 75.0

    def test_api_calls(self):
        collector = StatisticsCollector()
        collector.record_api_call("search_compound", success=True)
        collector.record_api_call("get_by_id", success=False)

        assert collector.metrics.api_calls == 2
        assert collector.metrics.api_errors == 1

    def test_path_counters(self):
        collector = StatisticsCollector()
        collector.record_season_walk()
        collector.record_manual_search()
        collector.record_duplicate_key()

        summary = collector.get_summary()
        assert summary["season_walks"] == 1
        assert summary["manual_searches"] == 1
        assert summary["duplicate_keys"] == 1

    def test_reset(self):
        collector = StatisticsCollector()
        collector.record_result(failed=True)

        collector.reset()

        assert collector.metrics.total_files == 0
