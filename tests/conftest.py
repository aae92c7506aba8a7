"""Shared fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from typing import List

import pytest

from redcache_core.store.memory import MemoryStore


class RecordingStore(MemoryStore):
    """MemoryStore remembering the size of every DEL and SCAN issued."""

    def __init__(self):
        super().__init__()
        self.delete_calls: List[int] = []
        self.scan_calls = 0
        self.keys_calls = 0

    def delete(self, *keys):
        self.delete_calls.append(len(keys))
        return super().delete(*keys)

    def scan(self, cursor=0, match=None, count=None):
        self.scan_calls += 1
        return super().scan(cursor, match=match, count=count)

    def keys(self, pattern):
        self.keys_calls += 1
        return super().keys(pattern)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def recording_store():
    return RecordingStore()
