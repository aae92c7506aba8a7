"""RedCache Configuration - Per-Cache Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Callable, Optional

from redcache_core.cache.keys import KeyConverter
from redcache_core.protocol.serializer import (
    PickleSerializer,
    SerializationPair,
    StringSerializer,
)
from redcache_core.writer.ttl import Duration, TtlFunction

KEY_SEPARATOR = "::"


def simple_prefix(name: str) -> str:
    """Default prefix: the cache name followed by '::'."""
    return f"{name}{KEY_SEPARATOR}"


@dataclass(frozen=True)
class CacheConfiguration:
    """Immutable cache configuration.

    Modifier methods return a changed copy, so a shared default can be
    specialized per cache without affecting other caches.

    Attributes:
        ttl_function: TTL of each written entry
        cache_null_values: Allow storing None
        use_prefix: Prefix store keys with the computed prefix
        key_prefix: Computes the prefix from the cache name
        key_serialization: Store key serialization
        value_serialization: Store value serialization
        key_converter: Turns cache keys into strings. Copies made by the
            modifiers share one converter; with_key_converter takes a
            private copy, so register converters before passing it in.

    Example:
        config = (
            CacheConfiguration.default_config()
            .entry_ttl(timedelta(minutes=10))
            .disable_caching_null_values()
            .prefix_cache_name_with("app:")
        )
    """

    ttl_function: TtlFunction = field(default_factory=TtlFunction.persistent)
    cache_null_values: bool = True
    use_prefix: bool = True
    key_prefix: Callable[[str], str] = simple_prefix
    key_serialization: SerializationPair = field(
        default_factory=lambda: SerializationPair.from_serializer(StringSerializer())
    )
    value_serialization: SerializationPair = field(
        default_factory=lambda: SerializationPair.from_serializer(PickleSerializer())
    )
    key_converter: KeyConverter = field(default_factory=KeyConverter.default)

    @classmethod
    def default_config(cls) -> "CacheConfiguration":
        """Persistent entries, null values allowed, `name::` prefix,
        UTF-8 keys and pickled values."""
        return cls()

    def entry_ttl(self, ttl: Duration) -> "CacheConfiguration":
        """Fixed TTL for every entry."""
        return replace(self, ttl_function=TtlFunction.just(ttl))

    def entry_ttl_function(self, ttl_function: TtlFunction) -> "CacheConfiguration":
        """TTL computed per entry."""
        if ttl_function is None:
            raise ValueError("TTL function must not be None")
        return replace(self, ttl_function=ttl_function)

    def disable_caching_null_values(self) -> "CacheConfiguration":
        """Reject None values instead of storing them."""
        return replace(self, cache_null_values=False)

    def disable_key_prefix(self) -> "CacheConfiguration":
        """Use the converted key as the store key, without prefix."""
        return replace(self, use_prefix=False)

    def prefix_cache_name_with(self, prefix: str) -> "CacheConfiguration":
        """Prefix keys with prefix + cache name + '::'."""
        if prefix is None:
            raise ValueError("Prefix must not be None")
        return self.compute_prefix_with(lambda name: simple_prefix(f"{prefix}{name}"))

    def compute_prefix_with(self, key_prefix: Callable[[str], str]) -> "CacheConfiguration":
        """Compute the key prefix from the cache name."""
        if key_prefix is None:
            raise ValueError("Key prefix function must not be None")
        return replace(self, use_prefix=True, key_prefix=key_prefix)

    def serialize_keys_with(self, pair: SerializationPair) -> "CacheConfiguration":
        if pair is None:
            raise ValueError("Key serialization pair must not be None")
        return replace(self, key_serialization=pair)

    def serialize_values_with(self, pair: SerializationPair) -> "CacheConfiguration":
        if pair is None:
            raise ValueError("Value serialization pair must not be None")
        return replace(self, value_serialization=pair)

    def with_key_converter(self, key_converter: KeyConverter) -> "CacheConfiguration":
        if key_converter is None:
            raise ValueError("Key converter must not be None")
        return replace(self, key_converter=key_converter.copy())

    def get_key_prefix_for(self, cache_name: str) -> str:
        """Prefix applied to keys of cache_name, empty when disabled."""
        if cache_name is None:
            raise ValueError("Cache name must not be None")
        return self.key_prefix(cache_name) if self.use_prefix else ""

    def get_ttl(self, key: Any, value: Any) -> timedelta:
        """TTL for an entry about to be written."""
        return self.ttl_function.get_time_to_live(key, value)


__all__ = ["CacheConfiguration", "simple_prefix", "KEY_SEPARATOR"]
