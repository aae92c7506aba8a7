"""Metrics module - Per-cache statistics."""

from redcache_core.metrics.collector import (
    CacheStatistics,
    CacheStatisticsCollector,
    DefaultCacheStatisticsCollector,
    NoOpCacheStatisticsCollector,
)

__all__ = [
    "CacheStatistics",
    "CacheStatisticsCollector",
    "DefaultCacheStatisticsCollector",
    "NoOpCacheStatisticsCollector",
]
