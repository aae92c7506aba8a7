"""RedCache Lock - Advisory Per-Cache Locking.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Optional

from redcache_core.exceptions import LockTimeoutError
from redcache_core.store.backend import StorageBackend
from redcache_core.writer.ttl import to_millis

logger = logging.getLogger(__name__)

LOCK_SUFFIX = "~lock"
DEFAULT_RETRY_INTERVAL = timedelta(milliseconds=50)
DEFAULT_LOCK_TIMEOUT = timedelta(seconds=10)
DEFAULT_LOCK_TTL = timedelta(seconds=60)


def lock_key(name: str) -> bytes:
    """Store key of the lock guarding cache name."""
    return f"{name}{LOCK_SUFFIX}".encode("utf-8")


class CacheLock:
    """Cooperative lock per cache name, held as a sentinel key in the store.

    The lock is the existence of `<name>~lock`; its value is empty and
    carries no owner, so any client may release it. Only callers that check
    the sentinel are excluded. The store does not enforce anything.

    A safety TTL on the sentinel keeps a crashed holder from blocking the
    cache forever, and every wait is bounded by `timeout`.

    Example:
        lock = CacheLock(store)
        lock.acquire("users")
        try:
            ...
        finally:
            lock.release("users")
    """

    def __init__(
        self,
        store: StorageBackend,
        retry_interval: timedelta = DEFAULT_RETRY_INTERVAL,
        timeout: Optional[timedelta] = DEFAULT_LOCK_TIMEOUT,
        lock_ttl: Optional[timedelta] = DEFAULT_LOCK_TTL,
    ):
        """Initialize lock.

        Args:
            store: Store holding the sentinel keys
            retry_interval: Sleep between attempts, must be positive
            timeout: Maximum wait, None to wait forever
            lock_ttl: Expiry of the sentinel key, None for no expiry

        Raises:
            ValueError: If retry_interval is not positive
        """
        if retry_interval <= timedelta(0):
            raise ValueError("Lock retry interval must be positive")

        self._store = store
        self.retry_interval = retry_interval
        self.timeout = timeout
        self.lock_ttl = lock_ttl

    def _deadline(self, start_ns: int) -> Optional[int]:
        if self.timeout is None:
            return None
        return start_ns + self.timeout // timedelta(microseconds=1) * 1000

    def _pause(self, name: str, deadline: Optional[int]) -> None:
        """Sleep one retry interval, or raise once the deadline passed."""
        interval = self.retry_interval.total_seconds()

        if deadline is not None:
            remaining = (deadline - time.monotonic_ns()) / 1e9
            if remaining <= 0:
                logger.warning(f"Gave up waiting for lock on cache '{name}' after {self.timeout}")
                raise LockTimeoutError(name, self.timeout)
            interval = min(interval, remaining)

        time.sleep(interval)

    def acquire(self, name: str) -> int:
        """Block until the lock for name is obtained.

        Args:
            name: Cache name

        Returns:
            Nanoseconds spent waiting

        Raises:
            LockTimeoutError: If the timeout elapsed first
        """
        key = lock_key(name)
        px = to_millis(self.lock_ttl)
        start = time.monotonic_ns()
        deadline = self._deadline(start)

        while not self._store.set_nx(key, b"", px=px):
            self._pause(name, deadline)

        waited = time.monotonic_ns() - start
        logger.debug(f"Acquired lock on cache '{name}' after {waited / 1e6:.1f}ms")
        return waited

    def wait_until_unlocked(self, name: str) -> int:
        """Block while another client holds the lock for name.

        Does not take the lock.

        Args:
            name: Cache name

        Returns:
            Nanoseconds spent waiting

        Raises:
            LockTimeoutError: If the timeout elapsed first
        """
        key = lock_key(name)
        start = time.monotonic_ns()
        deadline = self._deadline(start)

        while self._store.exists(key):
            self._pause(name, deadline)

        return time.monotonic_ns() - start

    def release(self, name: str) -> bool:
        """Remove the lock for name, whoever set it.

        Args:
            name: Cache name

        Returns:
            True if a lock was present
        """
        released = self._store.delete(lock_key(name)) > 0
        logger.debug(f"Released lock on cache '{name}'")
        return released

    def is_locked(self, name: str) -> bool:
        """Check whether the lock for name is held."""
        return self._store.exists(lock_key(name))

    def __repr__(self) -> str:
        return (
            f"CacheLock(retry_interval={self.retry_interval}, "
            f"timeout={self.timeout}, lock_ttl={self.lock_ttl})"
        )


__all__ = [
    "CacheLock",
    "lock_key",
    "LOCK_SUFFIX",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_LOCK_TIMEOUT",
    "DEFAULT_LOCK_TTL",
]
