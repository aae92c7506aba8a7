"""Store module - Key-value store backends for caching."""

from redcache_core.store.backend import (
    StorageBackend,
    StorageStats,
    StorageConfig,
)
from redcache_core.store.memory import MemoryStore
from redcache_core.store.redis import RedisStore, RedisConfig

__all__ = [
    "StorageBackend",
    "StorageStats",
    "StorageConfig",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
]
