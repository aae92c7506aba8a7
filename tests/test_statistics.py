"""Tests for cache statistics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading

import pytest

from redcache_core.metrics.collector import (
    CacheStatisticsCollector,
    DefaultCacheStatisticsCollector,
    NoOpCacheStatisticsCollector,
    STRIPES,
    _Adder,
)


class TestDefaultCollector:
    """Tests for the recording collector."""

    def test_counters(self):
        """Test increments per counter."""
        collector = CacheStatisticsCollector.create()

        collector.inc_puts("users")
        collector.inc_gets("users")
        collector.inc_gets("users")
        collector.inc_hits("users")
        collector.inc_misses("users")
        collector.inc_deletes("users")
        collector.inc_deletes_by("users", 4)
        collector.inc_lock_time("users", 2_000_000)

        stats = collector.get_cache_statistics("users")
        assert stats.cache_name == "users"
        assert stats.puts == 1
        assert stats.gets == 2
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.deletes == 5
        assert stats.lock_wait_ns == 2_000_000
        assert stats.lock_wait_time.total_seconds() == pytest.approx(0.002)
        assert stats.pending == 0
        assert stats.hit_rate == pytest.approx(0.5)

    def test_caches_are_independent(self):
        """Test counters are kept per cache name."""
        collector = CacheStatisticsCollector.create()

        collector.inc_puts("users")
        collector.inc_puts("users")
        collector.inc_puts("orders")

        assert collector.get_cache_statistics("users").puts == 2
        assert collector.get_cache_statistics("orders").puts == 1
        assert collector.get_cache_statistics("unknown").puts == 0

    def test_snapshot_is_frozen(self):
        """Test snapshots do not follow later increments."""
        collector = CacheStatisticsCollector.create()
        collector.inc_gets("users")

        snapshot = collector.get_cache_statistics("users")
        collector.inc_gets("users")

        assert snapshot.gets == 1
        assert collector.get_cache_statistics("users").gets == 2

    def test_reset(self):
        """Test reset zeroes counters and advances last_reset."""
        collector = CacheStatisticsCollector.create()
        collector.inc_puts("users")
        collector.inc_hits("users")
        before = collector.get_cache_statistics("users")

        collector.reset("users")
        after = collector.get_cache_statistics("users")

        assert after.puts == 0
        assert after.hits == 0
        assert after.last_reset > before.last_reset
        assert after.since == before.since
        assert before.puts == 1

    def test_repeated_reset_advances(self):
        """Test last_reset strictly increases on every reset."""
        collector = CacheStatisticsCollector.create()
        resets = []
        for _ in range(5):
            collector.reset("users")
            resets.append(collector.get_cache_statistics("users").last_reset)

        assert resets == sorted(set(resets))

    def test_monotonic_between_resets(self):
        """Test counters never decrease without a reset."""
        collector = CacheStatisticsCollector.create()
        previous = 0
        for _ in range(20):
            collector.inc_gets("users")
            current = collector.get_cache_statistics("users").gets
            assert current > previous
            previous = current

    def test_concurrent_increments(self):
        """Test no increments are lost across threads."""
        collector = CacheStatisticsCollector.create()

        def worker():
            for _ in range(1000):
                collector.inc_puts("users")
                collector.inc_deletes_by("users", 2)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = collector.get_cache_statistics("users")
        assert stats.puts == 8000
        assert stats.deletes == 16000

    def test_thread_churn_keeps_cells_bounded(self):
        """Test many short-lived threads do not grow the counters."""
        collector = DefaultCacheStatisticsCollector()

        for _ in range(500):
            thread = threading.Thread(target=collector.inc_gets, args=("users",))
            thread.start()
            thread.join()

        assert collector.get_cache_statistics("users").gets == 500
        assert len(collector._for("users").gets._cells) <= STRIPES

    def test_shared_cells_lose_nothing(self):
        """Test threads sharing a cell still add up exactly."""
        adder = _Adder()
        threads = [
            threading.Thread(target=lambda: [adder.add() for _ in range(500)])
            for _ in range(STRIPES * 2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert adder.sum() == STRIPES * 2 * 500
        adder.reset()
        assert adder.sum() == 0

    def test_to_prometheus(self):
        """Test Prometheus export."""
        collector = DefaultCacheStatisticsCollector()
        collector.inc_hits("users")

        text = collector.to_prometheus()
        assert 'cache_hits_total{cache="users"} 1' in text
        assert "# TYPE cache_puts_total counter" in text

    def test_to_dict(self):
        """Test dict conversion."""
        collector = CacheStatisticsCollector.create()
        collector.inc_gets("users")

        data = collector.get_cache_statistics("users").to_dict()
        assert data["gets"] == 1
        assert data["pending"] == 1
        assert data["cache_name"] == "users"


class TestNoOpCollector:
    """Tests for disabled statistics."""

    def test_reports_zeros(self):
        """Test increments are ignored and snapshots are zero."""
        collector = CacheStatisticsCollector.none()
        assert isinstance(collector, NoOpCacheStatisticsCollector)

        collector.inc_puts("users")
        collector.inc_gets("users")
        collector.inc_deletes_by("users", 10)
        collector.inc_lock_time("users", 1000)

        stats = collector.get_cache_statistics("users")
        assert stats.cache_name == "users"
        assert (stats.puts, stats.gets, stats.hits, stats.misses, stats.deletes) == (0, 0, 0, 0, 0)
        assert stats.lock_wait_ns == 0

    def test_reset_is_harmless(self):
        """Test reset does not raise."""
        collector = CacheStatisticsCollector.none()
        collector.reset("users")
        assert collector.get_cache_statistics("users").puts == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
