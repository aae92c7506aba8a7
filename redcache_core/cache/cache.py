"""RedCache Cache - Named Cache over a Cache Writer.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Optional

from redcache_core.cache.config import CacheConfiguration
from redcache_core.exceptions import ValueRetrievalError
from redcache_core.metrics.collector import CacheStatistics
from redcache_core.writer.writer import CacheWriter

logger = logging.getLogger(__name__)

# Stored in place of None so a cached None differs from a missing entry.
NULL_VALUE = b"\x00redcache:null\x00"

_NULL = object()


@dataclass(frozen=True)
class ValueWrapper:
    """A cache hit. value may be None when None was cached."""

    value: Any

    def get(self) -> Any:
        return self.value


class _KeyLock:
    """Lock for one cache key; weakly registered so idle ones are collected."""

    __slots__ = ("lock", "__weakref__")

    def __init__(self):
        self.lock = threading.Lock()


class RedisCache:
    """Named cache backed by a CacheWriter.

    Adds to the writer:
    - Key conversion and `name::` prefixing
    - Value serialization with a sentinel for cached None
    - get_or_load, loading a missing value once per process

    Example:
        cache = RedisCache("users", CacheWriter.non_locking(store))

        cache.put("42", user)
        wrapper = cache.get("42")
        user = cache.get_or_load("43", lambda: db.get_user(43))
        cache.evict("42")
        cache.clear()
    """

    def __init__(
        self,
        name: str,
        writer: CacheWriter,
        config: Optional[CacheConfiguration] = None,
    ):
        """Initialize cache.

        Args:
            name: Cache name
            writer: Writer executing store operations
            config: Cache configuration
        """
        if name is None:
            raise ValueError("Name must not be None")
        if writer is None:
            raise ValueError("CacheWriter must not be None")

        self.name = name
        self.config = config or CacheConfiguration.default_config()
        self._writer = writer
        self._key_locks: "weakref.WeakValueDictionary[str, _KeyLock]" = weakref.WeakValueDictionary()
        self._key_locks_guard = threading.Lock()

    @property
    def native_cache(self) -> CacheWriter:
        """The underlying writer."""
        return self._writer

    def get(self, key: Any) -> Optional[ValueWrapper]:
        """Look up a value.

        Args:
            key: Cache key

        Returns:
            ValueWrapper on a hit (holding None if None was cached),
            None on a miss
        """
        store_key = self._serialize_key(self.create_cache_key(key))
        return self._wrap(self._writer.get(self.name, store_key))

    def get_or_load(self, key: Any, loader: Callable[[], Any]) -> Any:
        """Return the cached value, loading and caching it on a miss.

        Threads of this process racing on the same key run loader once;
        the others wait and read the stored result. Other keys are not
        blocked.

        Args:
            key: Cache key
            loader: Callable producing the value

        Returns:
            Cached or loaded value

        Raises:
            ValueRetrievalError: If loader raised; nothing is cached
        """
        wrapper = self.get(key)
        if wrapper is not None:
            return wrapper.value

        cache_key = self.create_cache_key(key)
        key_lock = self._lock_for(cache_key)

        with key_lock.lock:
            wrapper = self.get(key)
            if wrapper is not None:
                return wrapper.value

            try:
                value = loader()
            except Exception as e:
                logger.debug(f"Loader for key '{cache_key}' failed: {e}")
                raise ValueRetrievalError(key, e) from e

            self.put(key, value)
            return value

    def put(self, key: Any, value: Any) -> None:
        """Store a value.

        Raises:
            ValueError: If value is None and null values are disabled, or
                value serializes to the null marker
        """
        store_value = self._serialize_value(self._to_store_value(value))
        cache_key = self.create_cache_key(key)

        self._writer.put(
            self.name,
            self._serialize_key(cache_key),
            store_value,
            self.config.get_ttl(key, value),
        )

    def put_if_absent(self, key: Any, value: Any) -> Optional[ValueWrapper]:
        """Store a value unless the key is present.

        Returns:
            None if stored, otherwise the existing value
        """
        store_value = self._serialize_value(self._to_store_value(value))
        cache_key = self.create_cache_key(key)

        existing = self._writer.put_if_absent(
            self.name,
            self._serialize_key(cache_key),
            store_value,
            self.config.get_ttl(key, value),
        )
        return self._wrap(existing)

    def evict(self, key: Any) -> None:
        """Remove a single entry."""
        self._writer.remove(self.name, self._serialize_key(self.create_cache_key(key)))

    def clear(self, pattern: str = "*") -> int:
        """Remove entries whose key matches pattern.

        Args:
            pattern: Glob pattern over keys of this cache, without prefix

        Returns:
            Number of entries removed
        """
        store_pattern = self._serialize_key(self.create_cache_key(pattern))
        return self._writer.clean(self.name, store_pattern)

    def get_statistics(self) -> CacheStatistics:
        """Snapshot of this cache's statistics."""
        return self._writer.get_cache_statistics(self.name)

    def clear_statistics(self) -> None:
        """Reset this cache's statistics."""
        self._writer.clear_statistics(self.name)

    def create_cache_key(self, key: Any) -> str:
        """Convert key to its prefixed string form.

        Raises:
            ValueError: If key is None
            KeyConversionError: If key has no usable string form
        """
        if key is None:
            raise ValueError("Key must not be None")
        converted = self.config.key_converter.convert(key)
        return f"{self.config.get_key_prefix_for(self.name)}{converted}"

    def _lock_for(self, cache_key: str) -> _KeyLock:
        with self._key_locks_guard:
            key_lock = self._key_locks.get(cache_key)
            if key_lock is None:
                key_lock = _KeyLock()
                self._key_locks[cache_key] = key_lock
            return key_lock

    def _to_store_value(self, value: Any) -> Any:
        if value is None:
            if not self.config.cache_null_values:
                raise ValueError(
                    f"Cache '{self.name}' does not allow None values. Avoid storing None "
                    f"or enable null values in the CacheConfiguration."
                )
            return _NULL
        return value

    def _serialize_key(self, cache_key: str) -> bytes:
        return self.config.key_serialization.write(cache_key)

    def _serialize_value(self, value: Any) -> bytes:
        if value is _NULL:
            return NULL_VALUE
        data = self.config.value_serialization.write(value)
        if data == NULL_VALUE:
            raise ValueError(
                f"Cache '{self.name}' cannot store a value that serializes to the null marker"
            )
        return data

    def _wrap(self, data: Optional[bytes]) -> Optional[ValueWrapper]:
        if data is None:
            return None
        if data == NULL_VALUE:
            return ValueWrapper(None)
        return ValueWrapper(self.config.value_serialization.read(data))

    def __repr__(self) -> str:
        return f"RedisCache(name={self.name!r}, writer={self._writer!r})"


__all__ = ["RedisCache", "ValueWrapper", "NULL_VALUE"]
