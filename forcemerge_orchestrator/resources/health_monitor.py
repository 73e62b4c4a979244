"""
Node resource health gate for force merges.

The monitor is consulted once at the start of a cycle and again immediately
before every candidate shard, since merges themselves load the node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Optional

from ..validation import DenialReason, ValidationOutcome
from .data_models import ResourceSnapshot
from .node_stats import NodeResourceStatsProvider

if TYPE_CHECKING:
    from ..config import ResourceThresholdSettings
    from ..observability import ObservabilityManager


class HealthCheck(NamedTuple):
    outcome: ValidationOutcome
    snapshot: ResourceSnapshot


class ResourceHealthMonitor:
    """
    Allows a force merge only when the node has spare capacity.

    Denies, in order, on the first true condition: CPU above threshold,
    memory above threshold, heap above threshold, a garbage collection in
    the sampling window, no idle worker in the dedicated merge pool.
    """

    def __init__(
        self,
        provider: NodeResourceStatsProvider,
        cpu_threshold_percent: float = 80.0,
        mem_threshold_percent: float = 80.0,
        heap_threshold_percent: float = 80.0,
        pool_name: str = "force_merge",
        observer: Optional["ObservabilityManager"] = None,
    ):
        self.provider = provider
        self.cpu_threshold_percent = cpu_threshold_percent
        self.mem_threshold_percent = mem_threshold_percent
        self.heap_threshold_percent = heap_threshold_percent
        self.pool_name = pool_name
        self.observer = observer

    @classmethod
    def from_settings(
        cls,
        provider: NodeResourceStatsProvider,
        thresholds: "ResourceThresholdSettings",
        pool_name: str = "force_merge",
        observer: Optional["ObservabilityManager"] = None,
    ) -> "ResourceHealthMonitor":
        return cls(
            provider,
            cpu_threshold_percent=thresholds.cpu_threshold_percent,
            mem_threshold_percent=thresholds.mem_threshold_percent,
            heap_threshold_percent=thresholds.jvm_heap_threshold_percent,
            pool_name=pool_name,
            observer=observer,
        )

    def take_snapshot(self) -> ResourceSnapshot:
        """Read a fresh snapshot from the provider."""
        return ResourceSnapshot.from_node_stats(self.provider.snapshot(), self.pool_name)

    def evaluate(self, snapshot: ResourceSnapshot) -> ValidationOutcome:
        outcome = self._evaluate(snapshot)
        if not outcome.allowed and self.observer:
            self.observer.record_denial(outcome, snapshot=snapshot.to_dict())
        return outcome

    def _evaluate(self, snapshot: ResourceSnapshot) -> ValidationOutcome:
        if snapshot.cpu_percent > self.cpu_threshold_percent:
            return ValidationOutcome.deny(
                DenialReason.CPU, f"CPU usage too high: {snapshot.cpu_percent:.1f}%"
            )

        if snapshot.mem_used_percent > self.mem_threshold_percent:
            return ValidationOutcome.deny(
                DenialReason.MEMORY,
                f"Memory usage too high: {snapshot.mem_used_percent:.1f}%",
            )

        if snapshot.heap_used_percent > self.heap_threshold_percent:
            return ValidationOutcome.deny(
                DenialReason.JVM_HEAP,
                f"Heap usage too high: {snapshot.heap_used_percent:.1f}%",
            )

        if snapshot.gc_active:
            return ValidationOutcome.deny(
                DenialReason.GC_ACTIVE, "Garbage collection ran during the sampling window"
            )

        if not snapshot.merge_worker_headroom:
            return ValidationOutcome.deny(
                DenialReason.NO_MERGE_THREADS,
                f"No idle worker in the '{self.pool_name}' pool",
            )

        return ValidationOutcome.allow()

    def check(self) -> HealthCheck:
        """Evaluate a fresh snapshot; never reuses an earlier reading."""
        snapshot = self.take_snapshot()
        return HealthCheck(self.evaluate(snapshot), snapshot)

    def log_metrics(self, snapshot: ResourceSnapshot) -> None:
        """Emit the node metrics a cycle decided on."""
        if not self.observer:
            return
        pool = snapshot.thread_pool
        self.observer.log_info(
            "Node resource metrics",
            cpu_percent=round(snapshot.cpu_percent, 1),
            load_average=list(snapshot.load_average),
            mem_used_percent=round(snapshot.mem_used_percent, 1),
            mem_free_bytes=snapshot.mem_free_bytes,
            mem_total_bytes=snapshot.mem_total_bytes,
            heap_used_percent=round(snapshot.heap_used_percent, 1),
            gc_active=snapshot.gc_active,
            pool_name=self.pool_name,
            pool_threads=pool.threads if pool else None,
            pool_active=pool.active if pool else None,
            pool_largest=pool.largest if pool else None,
            pool_queue=pool.queue if pool else None,
        )
