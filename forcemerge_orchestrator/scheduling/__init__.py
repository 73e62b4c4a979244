"""
Scheduling package: the recurring driver and the threads it runs on.
"""

from .worker_pool import MonitoredThreadPool
from .host import Cancellable, SchedulingHost, ThreadPoolSchedulingHost
from .driver import DriverState, PeriodicTaskDriver, ScheduleHandle

__all__ = [
    "MonitoredThreadPool",
    "Cancellable",
    "SchedulingHost",
    "ThreadPoolSchedulingHost",
    "DriverState",
    "PeriodicTaskDriver",
    "ScheduleHandle",
]
