"""Tests for TTL functions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from datetime import timedelta

import pytest

from redcache_core.writer.ttl import TtlFunction, to_millis


class TestToMillis:
    """Tests for TTL truncation."""

    @pytest.mark.parametrize(
        "ttl",
        [
            None,
            0,
            timedelta(0),
            timedelta(microseconds=1),
            timedelta(microseconds=999),
            0.0009,
            timedelta(seconds=-5),
        ],
    )
    def test_below_granularity_is_persistent(self, ttl):
        """Test durations under one millisecond never expire."""
        assert to_millis(ttl) is None

    def test_truncates_down(self):
        """Test partial milliseconds are dropped, never rounded up."""
        assert to_millis(timedelta(microseconds=1999)) == 1
        assert to_millis(timedelta(seconds=5, microseconds=500)) == 5000

    def test_seconds_as_numbers(self):
        """Test int and float seconds."""
        assert to_millis(5) == 5000
        assert to_millis(0.25) == 250


class TestTtlFunction:
    """Tests for TtlFunction."""

    def test_just(self):
        """Test fixed TTL."""
        ttl = TtlFunction.just(timedelta(minutes=5))
        assert ttl.get_time_to_live("key", "value") == timedelta(minutes=5)
        assert ttl("other", None) == timedelta(minutes=5)

    def test_just_seconds(self):
        """Test fixed TTL from seconds."""
        assert TtlFunction.just(30).get_time_to_live("key", 1) == timedelta(seconds=30)

    def test_persistent(self):
        """Test persistent TTL is zero."""
        assert TtlFunction.persistent().get_time_to_live("key", "value") == timedelta(0)

    def test_per_entry(self):
        """Test TTL computed from key and value on every call."""
        calls = []

        def compute(key, value):
            calls.append(key)
            return timedelta(seconds=60) if value else timedelta(seconds=5)

        ttl = TtlFunction.of(compute)
        assert ttl.get_time_to_live("a", "hit") == timedelta(seconds=60)
        assert ttl.get_time_to_live("b", None) == timedelta(seconds=5)
        assert calls == ["a", "b"]

    def test_none_result_is_persistent(self):
        """Test a function returning None means persistent."""
        assert TtlFunction.of(lambda k, v: None).get_time_to_live("k", "v") == timedelta(0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
