"""RedCache Exceptions - Cache Error Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional


class CacheError(Exception):
    """Base class for cache errors."""


class ValueRetrievalError(CacheError):
    """Raised when a value loader fails during get-or-load.

    Attributes:
        key: Cache key being loaded
    """

    def __init__(self, key: Any, cause: Optional[BaseException] = None):
        self.key = key
        message = f"Value for key '{key}' could not be loaded"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.__cause__ = cause


class KeyConversionError(CacheError):
    """Raised when a cache key has no usable string representation.

    Attributes:
        key_type: Type of the offending key
    """

    def __init__(self, key_type: type):
        self.key_type = key_type
        super().__init__(
            f"Cannot convert cache key of type {key_type.__qualname__} to str. "
            f"Register a converter or define __str__ on the key type."
        )


class LockTimeoutError(CacheError, TimeoutError):
    """Raised when the advisory cache lock cannot be obtained in time.

    Attributes:
        name: Cache name
        timeout: Time waited before giving up
    """

    def __init__(self, name: str, timeout: timedelta):
        self.name = name
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout.total_seconds():.3f}s waiting for lock on cache '{name}'"
        )


__all__ = [
    "CacheError",
    "ValueRetrievalError",
    "KeyConversionError",
    "LockTimeoutError",
]
