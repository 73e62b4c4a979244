"""
Data models for node resource health.

This module contains the dataclasses used throughout the resources package.
It has no internal dependencies to serve as a stable foundation layer.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class GcCollectorStats:
    """Collections performed by one collector during the sampling window."""

    name: str
    collection_count: int


@dataclass(frozen=True)
class ThreadPoolStats:
    """Point-in-time counters of a named worker pool."""

    name: str
    threads: int
    active: int
    largest: int
    queue: int

    @property
    def has_headroom(self) -> bool:
        # Idle capacity relative to the pool's historical peak
        return self.largest - self.active > 0


@dataclass(frozen=True)
class NodeStats:
    """Raw reading returned by a NodeResourceStatsProvider."""

    cpu_percent: float
    mem_used_percent: float
    heap_used_percent: float
    mem_free_bytes: int
    mem_total_bytes: int
    load_average: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    gc_collectors: List[GcCollectorStats] = field(default_factory=list)
    thread_pools: Dict[str, ThreadPoolStats] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def thread_pool_stats(self, name: str) -> Optional[ThreadPoolStats]:
        return self.thread_pools.get(name)


@dataclass(frozen=True)
class ResourceSnapshot:
    """Immutable view of node health used for one allow/deny decision."""

    cpu_percent: float
    mem_used_percent: float
    heap_used_percent: float
    gc_active: bool
    merge_worker_headroom: bool
    captured_at: float
    mem_free_bytes: int = 0
    mem_total_bytes: int = 0
    load_average: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    thread_pool: Optional[ThreadPoolStats] = None

    @classmethod
    def from_node_stats(cls, stats: NodeStats, pool_name: str) -> "ResourceSnapshot":
        pool = stats.thread_pool_stats(pool_name)
        return cls(
            cpu_percent=stats.cpu_percent,
            mem_used_percent=stats.mem_used_percent,
            heap_used_percent=stats.heap_used_percent,
            gc_active=any(c.collection_count > 0 for c in stats.gc_collectors),
            merge_worker_headroom=pool.has_headroom if pool is not None else False,
            captured_at=stats.timestamp,
            mem_free_bytes=stats.mem_free_bytes,
            mem_total_bytes=stats.mem_total_bytes,
            load_average=stats.load_average,
            thread_pool=pool,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for logging"""
        data = asdict(self)
        data["cpu_percent"] = round(self.cpu_percent, 1)
        data["mem_used_percent"] = round(self.mem_used_percent, 1)
        data["heap_used_percent"] = round(self.heap_used_percent, 1)
        return data
