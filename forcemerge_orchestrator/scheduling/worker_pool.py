"""
Dedicated worker pool for force-merge cycles.

Wraps a ThreadPoolExecutor and keeps the counters the resource health
monitor needs to decide whether a merge worker is free.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Set

from ..resources import ThreadPoolStats


class MonitoredThreadPool:
    """
    Fixed-size thread pool that reports ThreadPoolStats.

    `largest` is reported as the configured pool size so that an idle pool
    always shows headroom. A running cycle occupies one worker itself.
    """

    def __init__(self, name: str = "force_merge", max_workers: int = 2):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.name = name
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._active = 0
        self._queued = 0
        self._thread_ids: Set[int] = set()
        self._shutdown = False

    def submit(self, fn: Callable[[], object]) -> Future:
        with self._lock:
            if self._shutdown:
                raise RuntimeError(f"Worker pool '{self.name}' is shut down")
            self._queued += 1
        return self._executor.submit(self._run, fn)

    def _run(self, fn: Callable[[], object]) -> object:
        with self._lock:
            self._queued -= 1
            self._active += 1
            self._thread_ids.add(threading.get_ident())
        try:
            return fn()
        finally:
            with self._lock:
                self._active -= 1

    def stats(self) -> ThreadPoolStats:
        with self._lock:
            return ThreadPoolStats(
                name=self.name,
                threads=len(self._thread_ids),
                active=self._active,
                largest=self.max_workers,
                queue=self._queued,
            )

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work; an in-flight cycle is left to finish."""
        with self._lock:
            self._shutdown = True
        self._executor.shutdown(wait=wait)
