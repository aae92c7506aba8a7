"""RedCache Decorators - Caching Decorators.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import hashlib
import logging
from typing import Any, Callable, Optional, TypeVar

from redcache_core.cache.cache import RedisCache

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

MAX_KEY_LENGTH = 250


def _make_key(
    func: Callable,
    args: tuple,
    kwargs: dict,
    key_builder: Optional[Callable[..., Any]] = None,
    typed: bool = False,
) -> Any:
    """Build cache key from function call.

    Args:
        func: Function being cached
        args: Positional arguments
        kwargs: Keyword arguments
        key_builder: Custom key builder
        typed: Include types in key

    Returns:
        Cache key
    """
    if key_builder:
        return key_builder(*args, **kwargs)

    parts = [func.__module__, func.__qualname__]

    for arg in args:
        if typed:
            parts.append(f"{type(arg).__name__}:{arg}")
        else:
            parts.append(str(arg))

    # Sorted for consistency
    for k in sorted(kwargs.keys()):
        v = kwargs[k]
        if typed:
            parts.append(f"{k}={type(v).__name__}:{v}")
        else:
            parts.append(f"{k}={v}")

    key = ":".join(parts)

    if len(key) > MAX_KEY_LENGTH:
        key = hashlib.sha256(key.encode()).hexdigest()

    return key


def cacheable(
    cache: RedisCache,
    key_builder: Optional[Callable[..., Any]] = None,
    typed: bool = False,
) -> Callable[[F], F]:
    """Decorator caching function results in a RedisCache.

    A miss runs the function once per process and key; concurrent callers
    wait for that result. Exceptions from the function surface as
    ValueRetrievalError and nothing is cached.

    Args:
        cache: Target cache
        key_builder: Custom key builder
        typed: Include argument types in key

    Returns:
        Decorated function

    Example:
        @cacheable(users)
        def get_user(user_id: int) -> User:
            return db.get_user(user_id)

        @cacheable(users, key_builder=lambda user_id: user_id)
        def get_user_v2(user_id: int) -> User:
            return db.get_user(user_id)
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = _make_key(func, args, kwargs, key_builder=key_builder, typed=typed)
            return cache.get_or_load(cache_key, lambda: func(*args, **kwargs))

        def cache_key(*args, **kwargs) -> Any:
            """Get cache key for arguments."""
            return _make_key(func, args, kwargs, key_builder=key_builder, typed=typed)

        def cache_evict(*args, **kwargs) -> None:
            """Evict the cached result for arguments."""
            cache.evict(cache_key(*args, **kwargs))

        wrapper.cache = cache
        wrapper.cache_key = cache_key
        wrapper.cache_evict = cache_evict

        return wrapper  # type: ignore

    return decorator


def cache_evict(
    cache: RedisCache,
    key_builder: Optional[Callable[..., Any]] = None,
    all_entries: bool = False,
    before_invocation: bool = False,
) -> Callable[[F], F]:
    """Decorator evicting cache entries when a function runs.

    Args:
        cache: Target cache
        key_builder: Builds the key to evict from the call arguments
        all_entries: Clear the whole cache instead of one key
        before_invocation: Evict before calling, even if the call fails

    Returns:
        Decorated function

    Example:
        @cache_evict(users, key_builder=lambda user: user.id)
        def save_user(user: User) -> None:
            db.save(user)
    """
    if not all_entries and key_builder is None:
        raise ValueError("cache_evict needs a key_builder unless all_entries is set")

    def decorator(func: F) -> F:
        def evict(args: tuple, kwargs: dict) -> None:
            if all_entries:
                cache.clear()
            else:
                cache.evict(key_builder(*args, **kwargs))

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if before_invocation:
                evict(args, kwargs)
                return func(*args, **kwargs)

            result = func(*args, **kwargs)
            evict(args, kwargs)
            return result

        return wrapper  # type: ignore

    return decorator


__all__ = [
    "cacheable",
    "cache_evict",
]
