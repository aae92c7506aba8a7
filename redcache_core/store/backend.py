"""RedCache Storage Backend - Abstract Store Command Surface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name
    """

    name: str = "storage"


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read commands
        writes: Number of write commands
        deletes: Number of keys deleted
        errors: Number of failed commands
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class StorageBackend(ABC):
    """Abstract key-value store consumed by the cache writer.

    Implementations expose the handful of store commands the cache layer
    needs. Keys, values and patterns are raw bytes; every command is atomic
    for a single key, nothing is atomic across keys unless a backend says
    otherwise.

    Implementations:
    - MemoryStore: In-process dictionary
    - RedisStore: Redis via redis-py
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    def get(self, key: bytes) -> Optional[bytes]:
        """GET key.

        Args:
            key: Store key

        Returns:
            Stored value or None
        """
        pass

    @abstractmethod
    def set(self, key: bytes, value: bytes, px: Optional[int] = None) -> None:
        """SET key value [PX px].

        Args:
            key: Store key
            value: Value bytes
            px: Expiration in milliseconds, None for a persistent entry
        """
        pass

    @abstractmethod
    def set_nx(self, key: bytes, value: bytes, px: Optional[int] = None) -> bool:
        """SET key value NX [PX px].

        Args:
            key: Store key
            value: Value bytes
            px: Expiration in milliseconds

        Returns:
            True if the key was absent and has been written
        """
        pass

    @abstractmethod
    def pexpire(self, key: bytes, ms: int) -> bool:
        """PEXPIRE key ms.

        Returns:
            True if the timeout was set
        """
        pass

    @abstractmethod
    def pttl(self, key: bytes) -> int:
        """PTTL key.

        Returns:
            Remaining milliseconds, -1 when persistent, -2 when missing
        """
        pass

    @abstractmethod
    def delete(self, *keys: bytes) -> int:
        """DEL key [key ...].

        Returns:
            Number of keys removed
        """
        pass

    @abstractmethod
    def exists(self, key: bytes) -> bool:
        """EXISTS key."""
        pass

    @abstractmethod
    def keys(self, pattern: bytes) -> List[bytes]:
        """KEYS pattern.

        Walks the whole keyspace in one blocking call.
        """
        pass

    @abstractmethod
    def scan(
        self,
        cursor: int = 0,
        match: Optional[bytes] = None,
        count: Optional[int] = None,
    ) -> Tuple[int, List[bytes]]:
        """SCAN cursor [MATCH match] [COUNT count].

        Args:
            cursor: Cursor returned by the previous call, 0 to start
            match: Glob pattern
            count: Hint for the amount of work per call

        Returns:
            (next_cursor, keys); next_cursor is 0 once iteration is complete
        """
        pass

    def put_if_absent(
        self,
        key: bytes,
        value: bytes,
        px: Optional[int] = None,
    ) -> Optional[bytes]:
        """Write value unless key exists, returning the existing value.

        The default runs SETNX, then PEXPIRE on success, then GET on
        failure. Another client can observe the entry without its expiry
        between the first two commands. Backends able to do the whole
        sequence atomically override this.

        Args:
            key: Store key
            value: Value bytes
            px: Expiration in milliseconds

        Returns:
            None if written, otherwise the value already present
        """
        if self.set_nx(key, value):
            if px is not None:
                self.pexpire(key, px)
            return None

        return self.get(key)

    def close(self) -> None:
        """Release backend resources."""

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()

    def __contains__(self, key: bytes) -> bool:
        """Check if key exists."""
        return self.exists(key)

    def __enter__(self) -> "StorageBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["StorageBackend", "StorageConfig", "StorageStats"]
