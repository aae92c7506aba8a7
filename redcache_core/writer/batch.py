"""RedCache Batch Strategies - Pattern-Based Bulk Deletion.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from redcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


class BatchStrategy(ABC):
    """Enumerates and deletes the keys matching a pattern.

    Strategies are stateless; the only per-call state is the store-side
    cursor used by the scanning variant.
    """

    @abstractmethod
    def clean(self, store: StorageBackend, pattern: bytes) -> int:
        """Delete every key matching pattern.

        Args:
            store: Target store
            pattern: Glob pattern

        Returns:
            Number of keys deleted
        """
        pass


class KeysBatchStrategy(BatchStrategy):
    """One KEYS call followed by a single bulk DEL.

    KEYS walks the entire keyspace in one blocking command. Avoid it on
    large production datasets; use ScanBatchStrategy instead.
    """

    def clean(self, store: StorageBackend, pattern: bytes) -> int:
        keys = store.keys(pattern)
        if not keys:
            return 0

        deleted = store.delete(*keys)
        logger.debug(f"KEYS {pattern!r} removed {deleted} keys")
        return deleted

    def __repr__(self) -> str:
        return "KeysBatchStrategy()"


class ScanBatchStrategy(BatchStrategy):
    """Incremental SCAN with one DEL per non-empty batch.

    Each round trip examines at most batch_size keys, so the store is never
    blocked for long. Runs until the cursor returns to zero.
    """

    def __init__(self, batch_size: int):
        """Initialize scan strategy.

        Args:
            batch_size: COUNT hint for every SCAN call

        Raises:
            ValueError: If batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError(f"Batch size must be greater than zero, got {batch_size}")
        self.batch_size = batch_size

    def clean(self, store: StorageBackend, pattern: bytes) -> int:
        deleted = 0
        batches = 0
        cursor = 0

        while True:
            cursor, keys = store.scan(cursor, match=pattern, count=self.batch_size)
            if keys:
                deleted += store.delete(*keys)
                batches += 1
            if cursor == 0:
                break

        logger.debug(f"SCAN {pattern!r} removed {deleted} keys in {batches} batches")
        return deleted

    def __repr__(self) -> str:
        return f"ScanBatchStrategy(batch_size={self.batch_size})"


class BatchStrategies:
    """Factories for the built-in batch strategies."""

    @staticmethod
    def keys() -> BatchStrategy:
        """KEYS + single DEL."""
        return KeysBatchStrategy()

    @staticmethod
    def scan(batch_size: int) -> BatchStrategy:
        """Cursor-based SCAN in batches of batch_size."""
        return ScanBatchStrategy(batch_size)


__all__ = [
    "BatchStrategy",
    "BatchStrategies",
    "KeysBatchStrategy",
    "ScanBatchStrategy",
]
