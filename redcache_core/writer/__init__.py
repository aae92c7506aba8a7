"""Writer module - Cache operations, locking, TTL and bulk deletion."""

from redcache_core.writer.batch import (
    BatchStrategy,
    BatchStrategies,
    KeysBatchStrategy,
    ScanBatchStrategy,
)
from redcache_core.writer.lock import CacheLock
from redcache_core.writer.ttl import TtlFunction
from redcache_core.writer.writer import CacheWriter

__all__ = [
    "BatchStrategy",
    "BatchStrategies",
    "KeysBatchStrategy",
    "ScanBatchStrategy",
    "CacheLock",
    "TtlFunction",
    "CacheWriter",
]
