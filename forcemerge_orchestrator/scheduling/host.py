"""
Scheduling hosts: where a delayed task actually runs.

The periodic driver only needs `schedule(delay_seconds, fn)`. Tests inject a
manual host; production uses timers feeding the dedicated worker pool.
"""

from __future__ import annotations

import threading
from typing import Callable, Protocol, runtime_checkable

from .worker_pool import MonitoredThreadPool


@runtime_checkable
class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


@runtime_checkable
class SchedulingHost(Protocol):
    def schedule(self, delay_seconds: float, fn: Callable[[], None]) -> Cancellable:
        ...


class ThreadPoolSchedulingHost:
    """Arms a daemon timer that hands `fn` to the worker pool when it fires."""

    def __init__(self, pool: MonitoredThreadPool):
        self.pool = pool

    def schedule(self, delay_seconds: float, fn: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(delay_seconds, self._submit, args=(fn,))
        timer.daemon = True
        timer.name = f"{self.pool.name}-timer"
        timer.start()
        return timer

    def _submit(self, fn: Callable[[], None]) -> None:
        if self.pool.is_shutdown:
            return
        self.pool.submit(fn)
