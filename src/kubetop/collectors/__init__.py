"""Snapshot collection framework for kubetop.

This module provides the concurrent refresh pipeline:

- SnapshotSource: Abstract base class for per-resource sources
- FanInAggregator: Runs all sources concurrently and merges their rows
- RefreshScheduler: Repeats rounds on a fixed interval until stopped

All operations are asyncio-based for non-blocking performance.
"""

from kubetop.collectors.aggregator import FanInAggregator, SourceInfo, sort_rows
from kubetop.collectors.base import FetchResult, SnapshotSource
from kubetop.collectors.scheduler import RefreshScheduler, Renderer, SchedulerStats

__all__ = [
    "FanInAggregator",
    "FetchResult",
    "RefreshScheduler",
    "Renderer",
    "SchedulerStats",
    "SnapshotSource",
    "SourceInfo",
    "sort_rows",
]
