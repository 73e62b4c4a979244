"""
Node resource stats collection backed by psutil.

Features:
- Fresh CPU, memory, and process heap readings on every call
- Load average tracking for log context
- Garbage collection activity measured per sampling window
- Thread pool counters from registered worker pools
"""

from __future__ import annotations

import gc
import os
import threading
import time
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import psutil

from .data_models import GcCollectorStats, NodeStats, ThreadPoolStats


@runtime_checkable
class NodeResourceStatsProvider(Protocol):
    """Source of node resource readings. Must never return a cached reading."""

    def snapshot(self) -> NodeStats:
        ...


class StatsReportingPool(Protocol):
    name: str

    def stats(self) -> ThreadPoolStats:
        ...


class PsutilNodeStatsProvider:
    """
    Reads node resource usage for the process hosting the scheduler.

    The interpreter's heap stands in for a managed runtime heap: the heap
    percentage is this process' resident memory as a share of physical memory.
    Only collections of the tracked generations count as GC activity; by
    default that is the full (generation 2) collection, since young
    collections run continuously in any busy interpreter.
    """

    def __init__(self, tracked_generations: Sequence[int] = (2,)):
        self.tracked_generations = tuple(tracked_generations)
        self._process = psutil.Process()
        self._lock = threading.RLock()
        self._pools: Dict[str, StatsReportingPool] = {}
        self._last_gc_counts = self._gc_counts()

        # Initialize CPU monitoring; the first non-blocking call always returns 0.0
        psutil.cpu_percent(interval=None)

    def register_thread_pool(self, pool: StatsReportingPool) -> None:
        """Report counters of `pool` under its name on every snapshot."""
        with self._lock:
            self._pools[pool.name] = pool

    def unregister_thread_pool(self, name: str) -> None:
        with self._lock:
            self._pools.pop(name, None)

    def snapshot(self) -> NodeStats:
        """Capture a fresh reading of node resources."""
        virtual_memory = psutil.virtual_memory()

        with self._lock:
            collectors = self._sample_gc_window()
            pools = {name: pool.stats() for name, pool in self._pools.items()}

        return NodeStats(
            cpu_percent=psutil.cpu_percent(interval=None),
            mem_used_percent=virtual_memory.percent,
            heap_used_percent=self._process.memory_percent(),
            mem_free_bytes=int(virtual_memory.available),
            mem_total_bytes=int(virtual_memory.total),
            load_average=self._load_average(),
            gc_collectors=collectors,
            thread_pools=pools,
            timestamp=time.time(),
        )

    def _sample_gc_window(self) -> List[GcCollectorStats]:
        """Collections per tracked generation since the previous sample."""
        counts = self._gc_counts()
        collectors = [
            GcCollectorStats(
                name=f"gen{generation}",
                collection_count=max(0, counts[generation] - self._last_gc_counts[generation]),
            )
            for generation in self.tracked_generations
            if generation < len(counts)
        ]
        self._last_gc_counts = counts
        return collectors

    @staticmethod
    def _gc_counts() -> List[int]:
        return [generation["collections"] for generation in gc.get_stats()]

    @staticmethod
    def _load_average() -> Tuple[float, float, float]:
        return os.getloadavg() if hasattr(os, "getloadavg") else (0.0, 0.0, 0.0)


def create_node_stats_provider(
    pools: Optional[Sequence[StatsReportingPool]] = None,
) -> PsutilNodeStatsProvider:
    """Build a psutil provider with the given worker pools registered."""
    provider = PsutilNodeStatsProvider()
    for pool in pools or ():
        provider.register_thread_pool(pool)
    return provider
