"""Cache module - Named caches, configuration and management.

This module provides the cache facade over the cache writer.
"""

from redcache_core.cache.keys import KeyConverter
from redcache_core.cache.config import CacheConfiguration
from redcache_core.cache.cache import (
    RedisCache,
    ValueWrapper,
    NULL_VALUE,
)
from redcache_core.cache.manager import RedisCacheManager
from redcache_core.cache.decorator import cacheable, cache_evict

__all__ = [
    "KeyConverter",
    "CacheConfiguration",
    "RedisCache",
    "ValueWrapper",
    "NULL_VALUE",
    "RedisCacheManager",
    "cacheable",
    "cache_evict",
]
