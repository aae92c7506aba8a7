"""Tests for CacheWriter.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading
import time
from datetime import timedelta
from unittest import mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from redcache_core.exceptions import LockTimeoutError
from redcache_core.metrics.collector import CacheStatisticsCollector
from redcache_core.writer.batch import BatchStrategies
from redcache_core.writer.writer import CacheWriter

CACHE = "cache"
KEY = b"cache::key-1"
VALUE = b"value"


def _locking(store, **kwargs):
    return CacheWriter.locking(store, retry_interval=timedelta(milliseconds=5), **kwargs)


class TestNonLockingWriter:
    """Tests for CacheWriter without locks."""

    def test_put_eternal(self, store):
        """Test put without TTL."""
        CacheWriter.non_locking(store).put(CACHE, KEY, VALUE, timedelta(0))

        assert store.get(KEY) == VALUE
        assert store.pttl(KEY) == -1

    def test_put_expiring(self, store):
        """Test put with TTL sets expiry in the same write."""
        CacheWriter.non_locking(store).put(CACHE, KEY, VALUE, timedelta(seconds=1))

        assert store.get(KEY) == VALUE
        assert 900 < store.pttl(KEY) <= 1000

    def test_put_sub_millisecond_ttl_is_persistent(self, store):
        """Test TTLs under one millisecond never expire early."""
        CacheWriter.non_locking(store).put(CACHE, KEY, VALUE, timedelta(microseconds=500))

        assert store.pttl(KEY) == -1

    def test_put_overwrites_and_resets_ttl(self, store):
        """Test a second put replaces value and TTL."""
        writer = CacheWriter.non_locking(store)
        writer.put(CACHE, KEY, VALUE, timedelta(seconds=1))
        writer.put(CACHE, KEY, b"other", timedelta(seconds=5))

        assert store.get(KEY) == b"other"
        assert store.pttl(KEY) > 4000

    def test_put_overwrite_to_eternal(self, store):
        """Test a persistent put clears a previous TTL."""
        writer = CacheWriter.non_locking(store)
        writer.put(CACHE, KEY, VALUE, timedelta(seconds=1))
        writer.put(CACHE, KEY, b"other", None)

        assert store.pttl(KEY) == -1

    def test_get(self, store):
        """Test get returns stored bytes or None."""
        writer = CacheWriter.non_locking(store)
        assert writer.get(CACHE, KEY) is None

        store.set(KEY, VALUE)
        assert writer.get(CACHE, KEY) == VALUE

    def test_put_if_absent_sequence(self, store):
        """Test first call writes, second returns the first value."""
        writer = CacheWriter.non_locking(store)

        assert writer.put_if_absent(CACHE, KEY, b"v1", timedelta(0)) is None
        assert writer.put_if_absent(CACHE, KEY, b"v2", timedelta(0)) == b"v1"
        assert store.get(KEY) == b"v1"

    def test_put_if_absent_expiring(self, store):
        """Test TTL is applied when put_if_absent writes."""
        CacheWriter.non_locking(store).put_if_absent(CACHE, KEY, VALUE, timedelta(seconds=1))

        assert 900 < store.pttl(KEY) <= 1000

    def test_put_if_absent_keeps_existing_ttl(self, store):
        """Test a losing put_if_absent does not touch the TTL."""
        store.set(KEY, VALUE)
        CacheWriter.non_locking(store).put_if_absent(CACHE, KEY, b"other", timedelta(seconds=1))

        assert store.pttl(KEY) == -1

    def test_remove(self, store):
        """Test remove deletes the key."""
        store.set(KEY, VALUE)
        CacheWriter.non_locking(store).remove(CACHE, KEY)

        assert not store.exists(KEY)

    def test_clean(self, store):
        """Test clean removes keys by pattern."""
        store.set(b"cache::a", VALUE)
        store.set(b"cache::b", VALUE)
        store.set(b"other::a", VALUE)

        deleted = CacheWriter.non_locking(store).clean(CACHE, b"cache::*")

        assert deleted == 2
        assert store.keys(b"*") == [b"other::a"]

    def test_ignores_existing_lock(self, store):
        """Test non-locking writers do not look at locks."""
        writer = CacheWriter.non_locking(store)
        store.set(b"cache~lock", b"")

        writer.put(CACHE, KEY, VALUE, None)
        assert writer.put_if_absent(CACHE, b"cache::other", VALUE, None) is None
        assert writer.clean(CACHE, b"cache::*") == 2

    def test_explicit_lock(self, store):
        """Test lock/unlock on a non-locking writer."""
        writer = CacheWriter.non_locking(store)

        writer.lock(CACHE)
        assert writer.is_locked(CACHE)
        writer.unlock(CACHE)
        assert not writer.is_locked(CACHE)

    @pytest.mark.parametrize(
        "call",
        [
            lambda w: w.get(None, KEY),
            lambda w: w.get(CACHE, None),
            lambda w: w.put(CACHE, KEY, None, None),
            lambda w: w.put_if_absent(CACHE, None, VALUE, None),
            lambda w: w.remove(CACHE, None),
            lambda w: w.clean(CACHE, None),
        ],
    )
    def test_rejects_missing_arguments(self, store, call):
        """Test arguments are checked before any store command."""
        with pytest.raises(ValueError):
            call(CacheWriter.non_locking(store))
        assert store.get_stats().reads == 0
        assert store.get_stats().writes == 0

    def test_store_errors_propagate(self):
        """Test store failures reach the caller unchanged."""
        store = mock.MagicMock()
        store.set.side_effect = RedisConnectionError("down")
        writer = CacheWriter.non_locking(store)

        with pytest.raises(RedisConnectionError):
            writer.put(CACHE, KEY, VALUE, None)
        assert store.set.call_count == 1


class TestLockingWriter:
    """Tests for CacheWriter with locks."""

    def test_is_locking(self, store):
        """Test mode detection."""
        assert _locking(store).is_locking
        assert not CacheWriter.non_locking(store).is_locking

    def test_locking_requires_interval(self, store):
        """Test locking writers need a positive interval."""
        with pytest.raises(ValueError):
            CacheWriter.locking(store, retry_interval=timedelta(0))

    def test_put_if_absent_releases_lock(self, store):
        """Test the lock is gone after put_if_absent."""
        writer = _locking(store)

        assert writer.put_if_absent(CACHE, KEY, VALUE, None) is None
        assert not writer.is_locked(CACHE)

    def test_put_if_absent_releases_lock_on_error(self, store):
        """Test the lock is released when the store fails."""
        writer = _locking(store)

        with mock.patch.object(store, "put_if_absent", side_effect=RedisConnectionError("down")):
            with pytest.raises(RedisConnectionError):
                writer.put_if_absent(CACHE, KEY, VALUE, None)

        assert not writer.is_locked(CACHE)

    def test_clean_releases_lock_on_error(self, store):
        """Test the lock is released when cleaning fails."""
        writer = _locking(store)

        with mock.patch.object(store, "keys", side_effect=RedisConnectionError("down")):
            with pytest.raises(RedisConnectionError):
                writer.clean(CACHE, b"cache::*")

        assert not writer.is_locked(CACHE)

    def test_ignores_lock_of_other_cache(self, store):
        """Test a lock only affects its own cache."""
        writer = _locking(store)
        writer.lock("other")

        writer.put(CACHE, KEY, VALUE, None)
        assert store.get(KEY) == VALUE

    def test_put_waits_for_lock_release(self, store):
        """Test put blocks until the lock is removed."""
        writer = _locking(store)
        writer.lock(CACHE)

        done = threading.Event()

        def put():
            writer.put(CACHE, KEY, VALUE, None)
            done.set()

        thread = threading.Thread(target=put)
        thread.start()

        time.sleep(0.1)
        assert not store.exists(KEY)
        assert not done.is_set()

        writer.unlock(CACHE)
        thread.join(timeout=2)

        assert done.is_set()
        assert store.get(KEY) == VALUE

    def test_get_does_not_wait(self, store):
        """Test reads ignore the lock."""
        writer = _locking(store)
        store.set(KEY, VALUE)
        writer.lock(CACHE)

        assert writer.get(CACHE, KEY) == VALUE

    def test_lock_timeout(self, store):
        """Test a held lock surfaces as LockTimeoutError."""
        writer = _locking(store, lock_timeout=timedelta(milliseconds=50))
        writer.lock(CACHE)

        with pytest.raises(LockTimeoutError):
            writer.put_if_absent(CACHE, KEY, VALUE, None)
        with pytest.raises(LockTimeoutError):
            writer.put(CACHE, KEY, VALUE, None)
        assert not store.exists(KEY)

    def test_concurrent_put_if_absent(self, store):
        """Test exactly one concurrent caller wins."""
        writer = _locking(store)
        callers = 10
        barrier = threading.Barrier(callers)
        results = {}

        def worker(i):
            barrier.wait()
            results[i] = writer.put_if_absent(CACHE, KEY, f"v{i}".encode(), timedelta(seconds=10))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(callers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        winners = [i for i, result in results.items() if result is None]
        assert len(winners) == 1

        stored = store.get(KEY)
        assert stored == f"v{winners[0]}".encode()
        assert all(result == stored for i, result in results.items() if i != winners[0])

    def test_clean_holds_lock(self, recording_store):
        """Test the lock is held while batches are deleted."""
        writer = _locking(recording_store, batch_strategy=BatchStrategies.scan(1))
        for i in range(3):
            recording_store.set(f"cache::{i}".encode(), VALUE)

        held = []
        original_scan = recording_store.scan

        def scan(cursor=0, match=None, count=None):
            held.append(recording_store.exists(b"cache~lock"))
            return original_scan(cursor, match=match, count=count)

        with mock.patch.object(recording_store, "scan", side_effect=scan):
            assert writer.clean(CACHE, b"cache::*") == 3

        assert held and all(held)
        assert not writer.is_locked(CACHE)


class TestWriterScenarios:
    """End-to-end writer scenarios."""

    def test_put_with_ttl_on_prefixed_key(self, store):
        """Test users::42 is stored with a TTL of about five seconds."""
        CacheWriter.non_locking(store).put("users", b"users::42", bytes([1, 2, 3]), timedelta(seconds=5))

        assert store.get(b"users::42") == bytes([1, 2, 3])
        assert 4900 < store.pttl(b"users::42") <= 5000

    def test_scan_clean_in_batches(self, recording_store):
        """Test five keys cleaned with batch size two."""
        for i in range(5):
            recording_store.set(f"users::{i}".encode(), VALUE)

        writer = CacheWriter.non_locking(recording_store, batch_strategy=BatchStrategies.scan(2))
        assert writer.clean("users", b"users::*") == 5

        assert recording_store.delete_calls == [2, 2, 1]
        assert recording_store.keys(b"users::*") == []


class TestWriterStatistics:
    """Tests for statistics recorded by the writer."""

    def _writer(self, store, locking=False):
        writer = _locking(store) if locking else CacheWriter.non_locking(store)
        return writer.with_statistics_collector(CacheStatisticsCollector.create())

    def test_disabled_by_default(self, store):
        """Test writers start with zeroed statistics."""
        writer = CacheWriter.non_locking(store)
        writer.put(CACHE, KEY, VALUE, None)

        assert writer.get_cache_statistics(CACHE).puts == 0

    def test_with_statistics_collector_keeps_settings(self, store):
        """Test the copy keeps mode and batch strategy."""
        strategy = BatchStrategies.scan(5)
        writer = _locking(store, batch_strategy=strategy)
        copy = writer.with_statistics_collector(CacheStatisticsCollector.create())

        assert copy.is_locking
        assert copy.batch_strategy is strategy

    def test_gets_hits_misses(self, store):
        """Test lookups are counted."""
        writer = self._writer(store)
        writer.put(CACHE, KEY, VALUE, None)
        writer.get(CACHE, KEY)
        writer.get(CACHE, b"cache::missing")

        stats = writer.get_cache_statistics(CACHE)
        assert stats.puts == 1
        assert stats.gets == 2
        assert stats.hits == 1
        assert stats.misses == 1

    def test_put_if_absent_counts_only_writes(self, store):
        """Test a losing put_if_absent is not a put."""
        writer = self._writer(store)
        writer.put_if_absent(CACHE, KEY, VALUE, None)
        writer.put_if_absent(CACHE, KEY, VALUE, None)

        assert writer.get_cache_statistics(CACHE).puts == 1

    def test_deletes(self, store):
        """Test removed keys are counted."""
        writer = self._writer(store)
        for i in range(3):
            store.set(f"cache::{i}".encode(), VALUE)

        writer.remove(CACHE, b"cache::0")
        writer.remove(CACHE, b"cache::missing")
        writer.clean(CACHE, b"cache::*")

        assert writer.get_cache_statistics(CACHE).deletes == 3

    def test_lock_wait_time(self, store):
        """Test time spent waiting on the lock is recorded."""
        writer = self._writer(store, locking=True)
        writer.lock(CACHE)
        threading.Timer(0.05, writer.unlock, args=(CACHE,)).start()

        writer.put(CACHE, KEY, VALUE, None)

        assert writer.get_cache_statistics(CACHE).lock_wait_ns >= 40_000_000

    def test_clear_statistics(self, store):
        """Test statistics reset."""
        writer = self._writer(store)
        writer.put(CACHE, KEY, VALUE, None)
        writer.clear_statistics(CACHE)

        assert writer.get_cache_statistics(CACHE).puts == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
