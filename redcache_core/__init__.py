"""RedCache - Redis-Backed Cache Abstraction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A client-side cache layer over Redis with:
- Named caches with key prefixing and value serialization
- Get-or-load with per-key in-process locking
- Optional advisory locking across clients
- Fixed or per-entry TTL policies
- KEYS or incremental SCAN bulk eviction
- Per-cache statistics

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        RedCache System                          │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ RedisCache  │  │   Manager   │  │   Config    │   CACHE     │
    │  │ get/put/    │  │ named cache │  │ TTL/prefix/ │   LAYER     │
    │  │ evict/clear │  │  registry   │  │ serializers │             │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │                 CacheWriter                    │             │
    │  │   ┌──────┐  ┌───────┐  ┌───────┐  ┌───────┐   │   WRITER    │
    │  │   │ Lock │  │  TTL  │  │ Batch │  │ Stats │   │   LAYER     │
    │  │   └──────┘  └───────┘  └───────┘  └───────┘   │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │              Storage Backends                  │             │
    │  │        ┌────────┐          ┌────────┐         │   STORAGE   │
    │  │        │ Redis  │          │ Memory │         │   LAYER     │
    │  │        └────────┘          └────────┘         │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from datetime import timedelta
    from redcache_core import (
        BatchStrategies, CacheConfiguration, CacheStatisticsCollector,
        CacheWriter, RedisCacheManager, RedisStore,
    )

    store = RedisStore()
    writer = CacheWriter.locking(
        store, batch_strategy=BatchStrategies.scan(1000),
    ).with_statistics_collector(CacheStatisticsCollector.create())

    manager = RedisCacheManager(
        writer,
        default_config=CacheConfiguration.default_config().entry_ttl(timedelta(minutes=5)),
    )

    users = manager.get_cache("users")
    users.put("42", {"name": "John"})
    user = users.get_or_load("43", lambda: fetch_user(43))
    users.clear()
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from redcache_core.exceptions import (
    CacheError,
    ValueRetrievalError,
    KeyConversionError,
    LockTimeoutError,
)
from redcache_core.store.backend import (
    StorageBackend,
    StorageConfig,
    StorageStats,
)
from redcache_core.store.memory import MemoryStore
from redcache_core.store.redis import RedisStore, RedisConfig
from redcache_core.metrics.collector import (
    CacheStatistics,
    CacheStatisticsCollector,
)
from redcache_core.writer.ttl import TtlFunction
from redcache_core.writer.batch import (
    BatchStrategy,
    BatchStrategies,
    KeysBatchStrategy,
    ScanBatchStrategy,
)
from redcache_core.writer.lock import CacheLock
from redcache_core.writer.writer import CacheWriter
from redcache_core.protocol.serializer import (
    Serializer,
    SerializationPair,
    StringSerializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from redcache_core.cache.keys import KeyConverter
from redcache_core.cache.config import CacheConfiguration
from redcache_core.cache.cache import RedisCache, ValueWrapper
from redcache_core.cache.manager import RedisCacheManager
from redcache_core.cache.decorator import cacheable, cache_evict

__all__ = [
    # Errors
    "CacheError",
    "ValueRetrievalError",
    "KeyConversionError",
    "LockTimeoutError",
    # Storage
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    # Statistics
    "CacheStatistics",
    "CacheStatisticsCollector",
    # Writer
    "TtlFunction",
    "BatchStrategy",
    "BatchStrategies",
    "KeysBatchStrategy",
    "ScanBatchStrategy",
    "CacheLock",
    "CacheWriter",
    # Protocol
    "Serializer",
    "SerializationPair",
    "StringSerializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    # Cache
    "KeyConverter",
    "CacheConfiguration",
    "RedisCache",
    "ValueWrapper",
    "RedisCacheManager",
    "cacheable",
    "cache_evict",
]
