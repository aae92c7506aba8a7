"""RedCache Memory Store - In-Memory Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import fnmatch
import itertools
import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

from redcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)

DEFAULT_SCAN_COUNT = 10


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    Speaks the same command surface as RedisStore while keeping all data in
    a dictionary. Best for tests and single-process applications.

    Features:
    - Millisecond expiration, applied lazily on access
    - Glob pattern matching for KEYS and SCAN
    - Cursor-based SCAN that tolerates deletes between calls
    - Atomic put_if_absent

    Example:
        store = MemoryStore()
        store.set(b"key", b"data", px=5000)
        value = store.get(b"key")
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize memory store.

        Args:
            config: Storage configuration
        """
        super().__init__(config)
        # key -> (value, expires_at monotonic seconds or None)
        self._data: Dict[bytes, Tuple[bytes, Optional[float]]] = {}
        self._cursors: Dict[int, bytes] = {}
        self._cursor_ids = itertools.count(1)
        self._lock = threading.RLock()

    def _expires_at(self, px: Optional[int]) -> Optional[float]:
        if px is None:
            return None
        return time.monotonic() + px / 1000.0

    def _live(self, key: bytes) -> Optional[Tuple[bytes, Optional[float]]]:
        """Return the record for key, dropping it if expired."""
        record = self._data.get(key)
        if record is None:
            return None

        expires_at = record[1]
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None

        return record

    def _live_keys(self) -> List[bytes]:
        return [k for k in list(self._data.keys()) if self._live(k) is not None]

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            self._stats.reads += 1
            record = self._live(key)
            return record[0] if record else None

    def set(self, key: bytes, value: bytes, px: Optional[int] = None) -> None:
        with self._lock:
            self._data[key] = (value, self._expires_at(px))
            self._stats.writes += 1

    def set_nx(self, key: bytes, value: bytes, px: Optional[int] = None) -> bool:
        with self._lock:
            if self._live(key) is not None:
                return False

            self._data[key] = (value, self._expires_at(px))
            self._stats.writes += 1
            return True

    def pexpire(self, key: bytes, ms: int) -> bool:
        with self._lock:
            record = self._live(key)
            if record is None:
                return False

            self._data[key] = (record[0], self._expires_at(ms))
            return True

    def pttl(self, key: bytes) -> int:
        with self._lock:
            record = self._live(key)
            if record is None:
                return -2
            if record[1] is None:
                return -1
            return max(0, int((record[1] - time.monotonic()) * 1000))

    def delete(self, *keys: bytes) -> int:
        with self._lock:
            count = 0
            for key in keys:
                if self._live(key) is not None:
                    del self._data[key]
                    count += 1

            self._stats.deletes += count
            return count

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return self._live(key) is not None

    def keys(self, pattern: bytes) -> List[bytes]:
        with self._lock:
            return [k for k in self._live_keys() if fnmatch.fnmatchcase(k, pattern)]

    def scan(
        self,
        cursor: int = 0,
        match: Optional[bytes] = None,
        count: Optional[int] = None,
    ) -> Tuple[int, List[bytes]]:
        """Examine the next `count` keys in sorted order.

        Like Redis, COUNT bounds the number of keys examined, not the number
        returned, so a call may return no matches with a non-zero cursor.
        Cursors remember the last examined key, so deleting returned keys
        before the next call never skips anything.
        """
        count = count or DEFAULT_SCAN_COUNT

        with self._lock:
            if cursor == 0:
                after = None
            elif cursor in self._cursors:
                after = self._cursors.pop(cursor)
            else:
                raise ValueError(f"Invalid scan cursor: {cursor}")

            remaining = sorted(k for k in self._live_keys() if after is None or k > after)
            examined = remaining[:count]
            matched = [
                k for k in examined
                if match is None or fnmatch.fnmatchcase(k, match)
            ]

            if len(remaining) <= count:
                return 0, matched

            next_cursor = next(self._cursor_ids)
            self._cursors[next_cursor] = examined[-1]
            return next_cursor, matched

    def put_if_absent(
        self,
        key: bytes,
        value: bytes,
        px: Optional[int] = None,
    ) -> Optional[bytes]:
        with self._lock:
            record = self._live(key)
            if record is not None:
                return record[0]

            self._data[key] = (value, self._expires_at(px))
            self._stats.writes += 1
            return None

    def flush(self) -> int:
        """Remove every key.

        Returns:
            Number of keys removed
        """
        with self._lock:
            count = len(self._data)
            self._data.clear()
            self._cursors.clear()
            return count

    def size(self) -> int:
        """Get live key count."""
        with self._lock:
            return len(self._live_keys())

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"MemoryStore(entries={len(self._data)})"


__all__ = ["MemoryStore"]
