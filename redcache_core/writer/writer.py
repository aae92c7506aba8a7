"""RedCache Writer - Cache Operations Against the Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from redcache_core.metrics.collector import (
    CacheStatistics,
    CacheStatisticsCollector,
)
from redcache_core.store.backend import StorageBackend
from redcache_core.writer.batch import BatchStrategy, KeysBatchStrategy
from redcache_core.writer.lock import (
    CacheLock,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_LOCK_TTL,
    DEFAULT_RETRY_INTERVAL,
)
from redcache_core.writer.ttl import Duration, as_timedelta, to_millis

logger = logging.getLogger(__name__)


def _require(value, message: str) -> None:
    if value is None:
        raise ValueError(message)


class CacheWriter:
    """Runs the primitive cache operations against a store.

    Two modes:

    - non-locking: every operation goes straight to the store. Fastest;
      put_if_absent relies on the store's own put_if_absent.
    - locking: put_if_absent and clean take the advisory lock of the cache
      name for their whole duration; put and remove wait until no lock is
      held before writing. get never waits.

    The lock only excludes other writers using the same protocol. Store
    errors reach the caller unchanged and are not retried.

    Example:
        writer = CacheWriter.locking(store, batch_strategy=BatchStrategies.scan(100))
        writer.put("users", b"users::42", b"...", timedelta(seconds=5))
        writer.clean("users", b"users::*")
    """

    def __init__(
        self,
        store: StorageBackend,
        retry_interval: Duration = timedelta(0),
        batch_strategy: Optional[BatchStrategy] = None,
        statistics: Optional[CacheStatisticsCollector] = None,
        lock_timeout: Optional[timedelta] = DEFAULT_LOCK_TIMEOUT,
        lock_ttl: Optional[timedelta] = DEFAULT_LOCK_TTL,
    ):
        """Initialize writer.

        Args:
            store: Target store
            retry_interval: Sleep between lock attempts; zero disables locking
            batch_strategy: Strategy used by clean
            statistics: Statistics collector
            lock_timeout: Maximum lock wait, None to wait forever
            lock_ttl: Safety expiry of the lock key
        """
        _require(store, "Store must not be None")

        self._store = store
        self.retry_interval = as_timedelta(retry_interval)
        self.batch_strategy = batch_strategy or KeysBatchStrategy()
        self.statistics = statistics or CacheStatisticsCollector.none()
        self.lock_timeout = lock_timeout
        self.lock_ttl = lock_ttl

        # Explicit lock()/unlock() still work on a non-locking writer.
        interval = self.retry_interval if self.is_locking else DEFAULT_RETRY_INTERVAL
        self._lock = CacheLock(store, interval, timeout=lock_timeout, lock_ttl=lock_ttl)

    @classmethod
    def non_locking(
        cls,
        store: StorageBackend,
        batch_strategy: Optional[BatchStrategy] = None,
    ) -> "CacheWriter":
        """Writer without locking."""
        return cls(store, batch_strategy=batch_strategy)

    @classmethod
    def locking(
        cls,
        store: StorageBackend,
        retry_interval: Duration = DEFAULT_RETRY_INTERVAL,
        batch_strategy: Optional[BatchStrategy] = None,
        lock_timeout: Optional[timedelta] = DEFAULT_LOCK_TIMEOUT,
        lock_ttl: Optional[timedelta] = DEFAULT_LOCK_TTL,
    ) -> "CacheWriter":
        """Writer serializing put_if_absent and clean per cache name."""
        if as_timedelta(retry_interval) <= timedelta(0):
            raise ValueError("Locking writers need a positive retry interval")
        return cls(
            store,
            retry_interval=retry_interval,
            batch_strategy=batch_strategy,
            lock_timeout=lock_timeout,
            lock_ttl=lock_ttl,
        )

    def with_statistics_collector(self, collector: CacheStatisticsCollector) -> "CacheWriter":
        """Copy of this writer reporting to collector."""
        _require(collector, "Statistics collector must not be None")
        return CacheWriter(
            self._store,
            retry_interval=self.retry_interval,
            batch_strategy=self.batch_strategy,
            statistics=collector,
            lock_timeout=self.lock_timeout,
            lock_ttl=self.lock_ttl,
        )

    @property
    def is_locking(self) -> bool:
        """True if this writer uses the advisory lock."""
        return self.retry_interval > timedelta(0)

    @property
    def store(self) -> StorageBackend:
        return self._store

    def get(self, name: str, key: bytes) -> Optional[bytes]:
        """Read a value.

        Args:
            name: Cache name
            key: Store key

        Returns:
            Stored bytes or None
        """
        _require(name, "Name must not be None")
        _require(key, "Key must not be None")

        value = self._store.get(key)

        self.statistics.inc_gets(name)
        if value is not None:
            self.statistics.inc_hits(name)
        else:
            self.statistics.inc_misses(name)

        return value

    def put(
        self,
        name: str,
        key: bytes,
        value: bytes,
        ttl: Optional[Duration] = None,
    ) -> None:
        """Write a value, expiring it with the same command when ttl is positive.

        Args:
            name: Cache name
            key: Store key
            value: Value bytes
            ttl: Time to live; zero or None for a persistent entry
        """
        _require(name, "Name must not be None")
        _require(key, "Key must not be None")
        _require(value, "Value must not be None")

        self._wait_until_unlocked(name)
        self._store.set(key, value, px=to_millis(ttl))
        self.statistics.inc_puts(name)

    def put_if_absent(
        self,
        name: str,
        key: bytes,
        value: bytes,
        ttl: Optional[Duration] = None,
    ) -> Optional[bytes]:
        """Write a value only if key is absent.

        Args:
            name: Cache name
            key: Store key
            value: Value bytes
            ttl: Time to live; zero or None for a persistent entry

        Returns:
            None if written, otherwise the value already stored
        """
        _require(name, "Name must not be None")
        _require(key, "Key must not be None")
        _require(value, "Value must not be None")

        if self.is_locking:
            self._acquire(name)

        try:
            existing = self._store.put_if_absent(key, value, px=to_millis(ttl))
        finally:
            if self.is_locking:
                self._lock.release(name)

        if existing is None:
            self.statistics.inc_puts(name)
        return existing

    def remove(self, name: str, key: bytes) -> None:
        """Delete a single key.

        Args:
            name: Cache name
            key: Store key
        """
        _require(name, "Name must not be None")
        _require(key, "Key must not be None")

        self._wait_until_unlocked(name)
        removed = self._store.delete(key)
        self.statistics.inc_deletes_by(name, removed)

    def clean(self, name: str, pattern: bytes) -> int:
        """Delete every key of the cache matching pattern.

        In locking mode the lock is held across all batches.

        Args:
            name: Cache name
            pattern: Glob pattern over store keys

        Returns:
            Number of keys deleted
        """
        _require(name, "Name must not be None")
        _require(pattern, "Pattern must not be None")

        if self.is_locking:
            self._acquire(name)

        try:
            deleted = self.batch_strategy.clean(self._store, pattern)
        finally:
            if self.is_locking:
                self._lock.release(name)

        self.statistics.inc_deletes_by(name, deleted)
        logger.debug(f"Cleaned {deleted} keys from cache '{name}' matching {pattern!r}")
        return deleted

    def lock(self, name: str) -> None:
        """Explicitly take the write lock of a cache."""
        self._acquire(name)

    def unlock(self, name: str) -> None:
        """Explicitly remove the write lock of a cache."""
        self._lock.release(name)

    def is_locked(self, name: str) -> bool:
        """Check if a cache currently has a lock set."""
        return self._lock.is_locked(name)

    def get_cache_statistics(self, name: str) -> CacheStatistics:
        """Snapshot of the statistics of cache name."""
        return self.statistics.get_cache_statistics(name)

    def clear_statistics(self, name: str) -> None:
        """Reset the statistics of cache name."""
        self.statistics.reset(name)

    def _acquire(self, name: str) -> None:
        waited = self._lock.acquire(name)
        self.statistics.inc_lock_time(name, waited)

    def _wait_until_unlocked(self, name: str) -> None:
        if not self.is_locking:
            return
        waited = self._lock.wait_until_unlocked(name)
        self.statistics.inc_lock_time(name, waited)

    def __repr__(self) -> str:
        mode = "locking" if self.is_locking else "non-locking"
        return f"CacheWriter({mode}, store={self._store!r}, batch_strategy={self.batch_strategy!r})"


__all__ = ["CacheWriter"]
