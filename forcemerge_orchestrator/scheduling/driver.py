"""
Fixed-delay periodic driver for maintenance cycles.

State machine:

    IDLE --start()--> SCHEDULED --timer fires--> RUNNING --cycle ends--> SCHEDULED
      \\                   |                        |
       `---- stop() -------+------- stop() ---------+------> CANCELLED (terminal)

The next cycle is armed only after the current one returns, so cycles never
overlap. A cycle that raises is logged and still re-armed.
"""

from __future__ import annotations

import functools
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..exceptions import ExecutionContext, SchedulerStateError
from .host import Cancellable, SchedulingHost

if TYPE_CHECKING:
    from ..observability import ObservabilityManager


class DriverState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    CANCELLED = "cancelled"


@dataclass
class ScheduleHandle:
    """Mutable schedule bookkeeping, only touched under the driver's lock."""

    interval_seconds: float
    running: bool = False
    cancelled: bool = False
    last_cycle_start: Optional[float] = None
    cycles_completed: int = 0
    cycles_errored: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


class PeriodicTaskDriver:
    """
    Runs `task` every `interval_seconds` on the given scheduling host.

    Args:
        task: Zero-argument callable executed once per cycle
        host: Scheduling primitive that runs `task` after a delay
        interval_seconds: Delay between the end of a cycle and the next start
        observer: Optional observability sink for lifecycle and failure logs
        autostart: Arm the first cycle during construction
        name: Name used in log messages
    """

    def __init__(
        self,
        task: Callable[[], Any],
        host: SchedulingHost,
        interval_seconds: float = 60.0,
        observer: Optional["ObservabilityManager"] = None,
        autostart: bool = True,
        name: str = "auto_force_merge",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.task = task
        self.host = host
        self.observer = observer
        self.name = name
        self.handle = ScheduleHandle(interval_seconds=interval_seconds)

        self._lock = threading.RLock()
        self._state = DriverState.IDLE
        self._pending: Optional[Cancellable] = None
        self._generation = 0

        if autostart:
            self.start()

    @property
    def state(self) -> DriverState:
        with self._lock:
            return self._state

    @property
    def interval_seconds(self) -> float:
        return self.handle.interval_seconds

    def start(self) -> bool:
        """Arm the first cycle. Returns False if already started or stopped."""
        with self._lock:
            if self._state is not DriverState.IDLE:
                return False
            self._arm()
        self._log_info("Periodic driver started", interval_seconds=self.interval_seconds)
        return True

    def stop(self) -> bool:
        """Cancel future cycles; an in-flight cycle runs to completion."""
        with self._lock:
            if self._state is DriverState.CANCELLED:
                return False
            self._state = DriverState.CANCELLED
            self.handle.cancelled = True
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        self._log_info("Periodic driver stopped", **self.handle.to_dict())
        return True

    def trigger_now(self) -> Any:
        """
        Run one cycle synchronously in the calling thread.

        A pending timer is cancelled and re-armed after the cycle, so the
        fixed delay is measured from this run. An exception raised by the
        task is counted and re-raised to the caller.

        Raises:
            SchedulerStateError: If the driver is stopped or a cycle is running
        """
        with self._lock:
            if self._state is DriverState.CANCELLED:
                raise SchedulerStateError(
                    f"Driver '{self.name}' is stopped",
                    context=ExecutionContext(metadata={"state": self._state.value}),
                )
            if self.handle.running:
                raise SchedulerStateError(
                    f"Driver '{self.name}' already has a cycle in flight",
                    context=ExecutionContext(metadata={"state": self._state.value}),
                )
            rearm = self._state is not DriverState.IDLE
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._begin_cycle()

        return self._execute(rearm=rearm, reraise=True)

    def _arm(self) -> None:
        # A timer whose callback was already handed off cannot be cancelled;
        # the generation lets _fire recognise it as stale.
        self._generation += 1
        self._state = DriverState.SCHEDULED
        self._pending = self.host.schedule(
            self.handle.interval_seconds, functools.partial(self._fire, self._generation)
        )

    def _begin_cycle(self) -> None:
        self._state = DriverState.RUNNING
        self.handle.running = True
        self.handle.last_cycle_start = time.time()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            if self._state is not DriverState.SCHEDULED or self.handle.running:
                return
            self._pending = None
            self._begin_cycle()
        self._execute(rearm=True, reraise=False)

    def _execute(self, rearm: bool, reraise: bool) -> Any:
        failure: Optional[Exception] = None
        result = None
        try:
            result = self.task()
        except Exception as e:
            failure = e
            self._log_exception(
                "Force merge cycle raised, rescheduling",
                error_type=type(e).__name__,
                error=str(e),
            )

        with self._lock:
            self.handle.running = False
            self.handle.cycles_completed += 1
            if failure is not None:
                self.handle.cycles_errored += 1
            if self._state is not DriverState.CANCELLED:
                if rearm:
                    self._arm()
                else:
                    self._state = DriverState.IDLE

        if failure is not None and reraise:
            raise failure
        return result

    def _log_info(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_info(message, driver=self.name, **kwargs)

    def _log_exception(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_exception(message, driver=self.name, **kwargs)
