"""RedCache Manager - Registry of Named Caches.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, List, Mapping, Optional

from redcache_core.cache.cache import RedisCache
from redcache_core.cache.config import CacheConfiguration
from redcache_core.store.backend import StorageBackend
from redcache_core.writer.writer import CacheWriter

logger = logging.getLogger(__name__)


class RedisCacheManager:
    """Creates and memoizes named caches sharing one writer.

    Caches configured up front use their own configuration; any other name
    gets the default configuration on first request, unless runtime
    creation is disabled.

    Example:
        manager = RedisCacheManager(
            CacheWriter.locking(store),
            default_config=CacheConfiguration.default_config().entry_ttl(300),
            initial_caches={"users": CacheConfiguration.default_config().entry_ttl(60)},
        )
        users = manager.get_cache("users")
    """

    def __init__(
        self,
        writer: CacheWriter,
        default_config: Optional[CacheConfiguration] = None,
        initial_caches: Optional[Mapping[str, CacheConfiguration]] = None,
        allow_runtime_creation: bool = True,
    ):
        """Initialize manager.

        Args:
            writer: Writer shared by all caches
            default_config: Configuration for caches created on demand
            initial_caches: Caches to create up front, by name
            allow_runtime_creation: Create unknown caches on request
        """
        if writer is None:
            raise ValueError("CacheWriter must not be None")

        self._writer = writer
        self.default_config = default_config or CacheConfiguration.default_config()
        self.allow_runtime_creation = allow_runtime_creation

        self._caches: Dict[str, RedisCache] = {}
        self._lock = threading.RLock()

        for name, config in (initial_caches or {}).items():
            self._caches[name] = self._create_cache(name, config)

    @classmethod
    def create(cls, store: StorageBackend) -> "RedisCacheManager":
        """Manager with a non-locking writer and default configuration."""
        return cls(CacheWriter.non_locking(store))

    def get_cache(self, name: str) -> Optional[RedisCache]:
        """Get or create a cache.

        Args:
            name: Cache name

        Returns:
            The cache, or None if unknown and runtime creation is disabled
        """
        cache = self._caches.get(name)
        if cache is not None:
            return cache

        with self._lock:
            cache = self._caches.get(name)
            if cache is None and self.allow_runtime_creation:
                cache = self._create_cache(name, self.default_config)
                self._caches[name] = cache
            return cache

    def get_cache_names(self) -> List[str]:
        """Names of all caches created so far."""
        return list(self._caches.keys())

    def get_cache_configurations(self) -> Dict[str, CacheConfiguration]:
        """Configuration per cache name."""
        return {name: cache.config for name, cache in self._caches.items()}

    def _create_cache(self, name: str, config: Optional[CacheConfiguration]) -> RedisCache:
        logger.debug(f"Creating cache '{name}'")
        return RedisCache(name, self._writer, config or self.default_config)

    def __contains__(self, name: str) -> bool:
        return name in self._caches

    def __len__(self) -> int:
        return len(self._caches)

    def __iter__(self) -> Iterator[RedisCache]:
        return iter(list(self._caches.values()))

    def __repr__(self) -> str:
        return f"RedisCacheManager(caches={self.get_cache_names()!r})"


__all__ = ["RedisCacheManager"]
