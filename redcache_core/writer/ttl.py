"""RedCache TTL - Time-To-Live Policies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Optional, Union

Duration = Union[timedelta, int, float]

_MILLISECOND = timedelta(milliseconds=1)


def as_timedelta(ttl: Optional[Duration]) -> timedelta:
    """Normalize a duration given as timedelta or seconds.

    Args:
        ttl: Duration or None

    Returns:
        timedelta, zero for None
    """
    if ttl is None:
        return timedelta(0)
    if isinstance(ttl, timedelta):
        return ttl
    return timedelta(seconds=ttl)


def to_millis(ttl: Optional[Duration]) -> Optional[int]:
    """Convert a TTL to store milliseconds.

    Truncates toward zero so an entry never outlives its TTL. Anything that
    truncates to zero or below means "persistent".

    Args:
        ttl: Duration or None

    Returns:
        Whole milliseconds, or None for a persistent entry
    """
    millis = as_timedelta(ttl) // _MILLISECOND
    return millis if millis > 0 else None


class TtlFunction:
    """Computes the TTL of a cache entry from its key and value.

    Evaluated on every write, so the TTL can vary per entry.

    Example:
        ttl = TtlFunction.just(timedelta(minutes=5))
        ttl.get_time_to_live("42", user)  # timedelta(minutes=5)

        by_size = TtlFunction.of(lambda key, value: 60 if value else 5)
    """

    def __init__(
        self,
        function: Callable[[Any, Any], Optional[Duration]],
        fixed: Optional[timedelta] = None,
    ):
        """Initialize TTL function.

        Args:
            function: Callable(key, value) returning a duration
            fixed: The constant TTL when function ignores its arguments
        """
        self._function = function
        self._fixed = fixed

    @classmethod
    def just(cls, ttl: Duration) -> "TtlFunction":
        """Fixed TTL for every entry."""
        fixed = as_timedelta(ttl)
        return cls(lambda key, value: fixed, fixed=fixed)

    @classmethod
    def persistent(cls) -> "TtlFunction":
        """Entries never expire."""
        return cls.just(timedelta(0))

    @classmethod
    def of(cls, function: Callable[[Any, Any], Optional[Duration]]) -> "TtlFunction":
        """Wrap an arbitrary callable."""
        return cls(function)

    def get_time_to_live(self, key: Any, value: Any) -> timedelta:
        """Compute the TTL for an entry.

        Args:
            key: Cache key
            value: Value being written, may be None

        Returns:
            TTL; zero means persistent
        """
        return as_timedelta(self._function(key, value))

    __call__ = get_time_to_live

    def __repr__(self) -> str:
        if self._fixed is not None:
            return f"TtlFunction.just({self._fixed!r})"
        return f"TtlFunction.of({self._function!r})"


__all__ = ["TtlFunction", "Duration", "as_timedelta", "to_millis"]
