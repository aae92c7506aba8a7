"""RedCache Statistics Collector - Per-Cache Statistics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


STRIPES = 16

_stripe = threading.local()
_next_stripe = itertools.count()


def _stripe_index() -> int:
    """Stripe of the calling thread, handed out round-robin on first use."""
    index = getattr(_stripe, "index", None)
    if index is None:
        index = next(_next_stripe) % STRIPES
        _stripe.index = index
    return index


class _Cell:
    __slots__ = ("value", "lock")

    def __init__(self):
        self.value = 0
        self.lock = threading.Lock()


class _Adder:
    """Counter striped over a fixed number of cells.

    Threads are spread over STRIPES cells and add under that cell's own
    lock, so unrelated threads rarely contend and memory stays bounded no
    matter how many threads come and go. Reads sum every cell. Reset zeroes
    each cell under its lock; an increment racing a reset lands either
    before or after it, never on top of a stale total.
    """

    def __init__(self):
        self._cells: List[_Cell] = [_Cell() for _ in range(STRIPES)]

    def add(self, n: int = 1) -> None:
        cell = self._cells[_stripe_index()]
        with cell.lock:
            cell.value += n

    def sum(self) -> int:
        total = 0
        for cell in self._cells:
            with cell.lock:
                total += cell.value
        return total

    def reset(self) -> None:
        for cell in self._cells:
            with cell.lock:
                cell.value = 0


@dataclass(frozen=True)
class CacheStatistics:
    """Point-in-time statistics of one cache.

    Attributes:
        cache_name: Cache name
        puts: Values written
        gets: Lookups issued
        hits: Lookups that found a value
        misses: Lookups that found nothing
        deletes: Keys removed
        lock_wait_ns: Time spent waiting on the cache lock
        since: When counting started for this cache
        last_reset: Last reset, equal to since if never reset
        time: When the snapshot was taken
    """

    cache_name: str
    puts: int = 0
    gets: int = 0
    hits: int = 0
    misses: int = 0
    deletes: int = 0
    lock_wait_ns: int = 0
    since: datetime = field(default_factory=datetime.now)
    last_reset: datetime = field(default_factory=datetime.now)
    time: datetime = field(default_factory=datetime.now)

    @property
    def pending(self) -> int:
        """Lookups counted but not yet resolved to a hit or miss."""
        return self.gets - (self.hits + self.misses)

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def lock_wait_time(self) -> timedelta:
        """Lock wait as a timedelta."""
        return timedelta(microseconds=self.lock_wait_ns / 1000)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cache_name": self.cache_name,
            "puts": self.puts,
            "gets": self.gets,
            "hits": self.hits,
            "misses": self.misses,
            "pending": self.pending,
            "deletes": self.deletes,
            "hit_rate": self.hit_rate,
            "lock_wait_ms": self.lock_wait_ns / 1e6,
            "since": self.since.isoformat(),
            "last_reset": self.last_reset.isoformat(),
            "time": self.time.isoformat(),
        }


class MutableCacheStatistics:
    """Live counters of one cache."""

    def __init__(self, cache_name: str):
        self.cache_name = cache_name
        self.since = datetime.now()
        self.last_reset = self.since

        self.puts = _Adder()
        self.gets = _Adder()
        self.hits = _Adder()
        self.misses = _Adder()
        self.deletes = _Adder()
        self.lock_wait_ns = _Adder()

    def reset(self) -> None:
        """Zero all counters and advance last_reset."""
        now = datetime.now()
        if now <= self.last_reset:
            now = self.last_reset + timedelta(microseconds=1)
        self.last_reset = now

        for counter in (self.puts, self.gets, self.hits, self.misses, self.deletes, self.lock_wait_ns):
            counter.reset()

    def capture_snapshot(self) -> CacheStatistics:
        """Copy the counters into an immutable snapshot."""
        return CacheStatistics(
            cache_name=self.cache_name,
            puts=self.puts.sum(),
            gets=self.gets.sum(),
            hits=self.hits.sum(),
            misses=self.misses.sum(),
            deletes=self.deletes.sum(),
            lock_wait_ns=self.lock_wait_ns.sum(),
            since=self.since,
            last_reset=self.last_reset,
            time=datetime.now(),
        )


class CacheStatisticsCollector(ABC):
    """Collects statistics per cache name.

    Increments are fire-and-forget and thread-safe. Reads return snapshots
    that do not change afterwards.

    Example:
        collector = CacheStatisticsCollector.create()
        collector.inc_gets("users")
        collector.inc_hits("users")

        stats = collector.get_cache_statistics("users")
        print(f"Hit rate: {stats.hit_rate:.2%}")
    """

    @staticmethod
    def create() -> "CacheStatisticsCollector":
        """Collector that records everything."""
        return DefaultCacheStatisticsCollector()

    @staticmethod
    def none() -> "CacheStatisticsCollector":
        """Collector that records nothing and reports zeros."""
        return NoOpCacheStatisticsCollector()

    @abstractmethod
    def inc_puts(self, cache_name: str) -> None:
        pass

    @abstractmethod
    def inc_gets(self, cache_name: str) -> None:
        pass

    @abstractmethod
    def inc_hits(self, cache_name: str) -> None:
        pass

    @abstractmethod
    def inc_misses(self, cache_name: str) -> None:
        pass

    def inc_deletes(self, cache_name: str) -> None:
        self.inc_deletes_by(cache_name, 1)

    @abstractmethod
    def inc_deletes_by(self, cache_name: str, value: int) -> None:
        pass

    @abstractmethod
    def inc_lock_time(self, cache_name: str, duration_ns: int) -> None:
        pass

    @abstractmethod
    def get_cache_statistics(self, cache_name: str) -> CacheStatistics:
        """Snapshot of the statistics of cache_name."""
        pass

    @abstractmethod
    def reset(self, cache_name: str) -> None:
        """Zero the statistics of cache_name."""
        pass


class DefaultCacheStatisticsCollector(CacheStatisticsCollector):
    """Thread-safe in-memory statistics, created lazily per cache name."""

    def __init__(self):
        self._stats: Dict[str, MutableCacheStatistics] = {}
        self._lock = threading.Lock()

    def _for(self, cache_name: str) -> MutableCacheStatistics:
        stats = self._stats.get(cache_name)
        if stats is None:
            with self._lock:
                stats = self._stats.get(cache_name)
                if stats is None:
                    stats = MutableCacheStatistics(cache_name)
                    self._stats[cache_name] = stats
        return stats

    def inc_puts(self, cache_name: str) -> None:
        self._for(cache_name).puts.add()

    def inc_gets(self, cache_name: str) -> None:
        self._for(cache_name).gets.add()

    def inc_hits(self, cache_name: str) -> None:
        self._for(cache_name).hits.add()

    def inc_misses(self, cache_name: str) -> None:
        self._for(cache_name).misses.add()

    def inc_deletes_by(self, cache_name: str, value: int) -> None:
        self._for(cache_name).deletes.add(value)

    def inc_lock_time(self, cache_name: str, duration_ns: int) -> None:
        self._for(cache_name).lock_wait_ns.add(duration_ns)

    def get_cache_statistics(self, cache_name: str) -> CacheStatistics:
        return self._for(cache_name).capture_snapshot()

    def reset(self, cache_name: str) -> None:
        self._for(cache_name).reset()
        logger.debug(f"Statistics of cache '{cache_name}' reset")

    def cache_names(self) -> List[str]:
        """Names of caches with recorded statistics."""
        return list(self._stats.keys())

    def to_prometheus(self) -> str:
        """Export all caches in Prometheus text format.

        Returns:
            Prometheus-formatted metrics
        """
        counters = [
            ("cache_puts_total", "Total cache puts", "puts"),
            ("cache_gets_total", "Total cache gets", "gets"),
            ("cache_hits_total", "Total cache hits", "hits"),
            ("cache_misses_total", "Total cache misses", "misses"),
            ("cache_deletes_total", "Total keys deleted", "deletes"),
        ]
        snapshots = [self.get_cache_statistics(name) for name in self.cache_names()]

        lines = []
        for metric, help_text, attr in counters:
            lines.append(f"# HELP {metric} {help_text}")
            lines.append(f"# TYPE {metric} counter")
            for snapshot in snapshots:
                lines.append(f'{metric}{{cache="{snapshot.cache_name}"}} {getattr(snapshot, attr)}')
            lines.append("")

        lines.append("# HELP cache_lock_wait_seconds_total Time spent waiting on cache locks")
        lines.append("# TYPE cache_lock_wait_seconds_total counter")
        for snapshot in snapshots:
            lines.append(
                f'cache_lock_wait_seconds_total{{cache="{snapshot.cache_name}"}} '
                f"{snapshot.lock_wait_ns / 1e9:.6f}"
            )

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"DefaultCacheStatisticsCollector(caches={len(self._stats)})"


class NoOpCacheStatisticsCollector(CacheStatisticsCollector):
    """Statistics disabled.

    Increments are ignored and every snapshot is all zeros.
    """

    def inc_puts(self, cache_name: str) -> None:
        pass

    def inc_gets(self, cache_name: str) -> None:
        pass

    def inc_hits(self, cache_name: str) -> None:
        pass

    def inc_misses(self, cache_name: str) -> None:
        pass

    def inc_deletes_by(self, cache_name: str, value: int) -> None:
        pass

    def inc_lock_time(self, cache_name: str, duration_ns: int) -> None:
        pass

    def get_cache_statistics(self, cache_name: str) -> CacheStatistics:
        now = datetime.now()
        return CacheStatistics(cache_name=cache_name, since=now, last_reset=now, time=now)

    def reset(self, cache_name: str) -> None:
        pass

    def __repr__(self) -> str:
        return "NoOpCacheStatisticsCollector()"


__all__ = [
    "CacheStatistics",
    "CacheStatisticsCollector",
    "DefaultCacheStatisticsCollector",
    "NoOpCacheStatisticsCollector",
    "MutableCacheStatistics",
]
