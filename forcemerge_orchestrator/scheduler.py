"""
Candidate scheduler: one maintenance cycle of automatic force merges.

A cycle walks the gates from the broadest to the narrowest. The cluster
gate runs first, then node health, then per-shard eligibility. Eligible
shards are merged one at a time with a fresh node health check before each
merge, so a batch stops as soon as the node becomes busy.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .cluster import ClusterEligibilityGate
from .cycle_report import CycleOutcome, CycleReport
from .exceptions import ExecutionContext, ForceMergeIOFailure, ShardStatsError
from .observability import ObservabilityManager
from .resources import ResourceHealthMonitor, ResourceSnapshot
from .shards import (ShardCandidate, ShardEligibilityEvaluator, ShardHandle,
                     ShardRegistry)
from .validation import ValidationOutcome


class CandidateScheduler:
    """Runs the gates, ranks candidates and merges them sequentially."""

    def __init__(
        self,
        gate: ClusterEligibilityGate,
        monitor: ResourceHealthMonitor,
        evaluator: ShardEligibilityEvaluator,
        registry: ShardRegistry,
        optimal_max_segments_count: int = 1,
        observer: Optional[ObservabilityManager] = None,
    ):
        if optimal_max_segments_count < 1:
            raise ValueError("optimal_max_segments_count must be >= 1")
        self.gate = gate
        self.monitor = monitor
        self.evaluator = evaluator
        self.registry = registry
        self.optimal_max_segments_count = optimal_max_segments_count
        self.observer = observer

    def run_cycle(self) -> CycleReport:
        """
        Execute one cycle and return what it decided and did.

        An unexpected error still records the report with an ERRORED outcome
        before it propagates to the driver.
        """
        report = CycleReport()
        try:
            return self._run(report)
        except Exception:
            self._finish(report, CycleOutcome.ERRORED)
            raise

    def _run(self, report: CycleReport) -> CycleReport:
        cluster_outcome = self.gate.check()
        if not cluster_outcome:
            return self._finish(report, CycleOutcome.CLUSTER_INELIGIBLE, cluster_outcome)

        snapshot = self.monitor.take_snapshot()
        self.monitor.log_metrics(snapshot)
        node_outcome = self.monitor.evaluate(snapshot)
        if not node_outcome:
            return self._finish(report, CycleOutcome.NODE_CONSTRAINED, node_outcome)

        candidates = self._collect_candidates(report, snapshot)
        report.candidates = [candidate.shard_id for candidate in candidates]
        if not candidates:
            return self._finish(report, CycleOutcome.NO_CANDIDATES)

        self._log_info(
            f"Found {len(candidates)} force merge candidate(s)",
            cycle_id=report.cycle_id,
            candidates=report.candidates,
        )

        for position, candidate in enumerate(candidates):
            recheck = self.monitor.check()
            if not recheck.outcome:
                report.not_attempted = report.candidates[position:]
                self._log_info(
                    "Node resources constrained, stopping force merge batch",
                    cycle_id=report.cycle_id,
                    reason=recheck.outcome.reason.value,
                    not_attempted=report.not_attempted,
                )
                return self._finish(report, CycleOutcome.HALTED, recheck.outcome)

            self._merge(report, candidate)

        return self._finish(report, CycleOutcome.COMPLETED)

    def _collect_candidates(
        self, report: CycleReport, snapshot: ResourceSnapshot
    ) -> List[ShardCandidate]:
        ranked: List[Tuple[ShardCandidate, int]] = []
        for handle in self.registry.primary_shards():
            try:
                stats = handle.stats()
            except (ShardStatsError, OSError) as e:
                self._log_warning(
                    "Failed to read shard stats, skipping shard",
                    cycle_id=report.cycle_id,
                    shard_id=handle.shard_id,
                    error=str(e),
                )
                continue

            self._log_info("Shard stats", cycle_id=report.cycle_id, **stats.to_dict())
            outcome = self.evaluator.evaluate(stats, snapshot.mem_free_bytes)
            if not outcome:
                report.skipped[stats.shard_id] = outcome.reason
                continue

            ranked.append((ShardCandidate.from_stats(stats, handle), self.evaluator.sort_key(stats)))

        ranked.sort(key=lambda item: (-item[1], item[0].shard_id))
        return [candidate for candidate, _ in ranked]

    def _merge(self, report: CycleReport, candidate: ShardCandidate) -> None:
        handle: ShardHandle = candidate.handle
        self._log_debug(
            "Starting force merge",
            cycle_id=report.cycle_id,
            shard_id=candidate.shard_id,
            segment_count=candidate.segment_count,
            max_segments=self.optimal_max_segments_count,
        )
        try:
            handle.force_merge(max_segments=self.optimal_max_segments_count)
        except ForceMergeIOFailure as e:
            e.context.cycle_id = report.cycle_id
            report.failed[candidate.shard_id] = str(e)
            self._log_error(
                "Force merge failed",
                cycle_id=report.cycle_id,
                shard_id=candidate.shard_id,
                error=e.to_dict(),
            )
            return
        except OSError as e:
            failure = ForceMergeIOFailure(
                f"I/O error while force merging shard {candidate.shard_id}",
                shard_id=candidate.shard_id,
                max_segments=self.optimal_max_segments_count,
                context=ExecutionContext(cycle_id=report.cycle_id, shard_id=candidate.shard_id),
                original_exception=e,
            )
            report.failed[candidate.shard_id] = str(failure)
            self._log_error(
                "Force merge failed",
                cycle_id=report.cycle_id,
                shard_id=candidate.shard_id,
                error=failure.to_dict(),
            )
            return

        report.merged.append(candidate.shard_id)
        self._log_info(
            "Force merge completed",
            cycle_id=report.cycle_id,
            shard_id=candidate.shard_id,
        )

    def _finish(
        self,
        report: CycleReport,
        outcome: CycleOutcome,
        denial: Optional[ValidationOutcome] = None,
    ) -> CycleReport:
        report.finish(outcome, denial)
        if self.observer:
            self.observer.record_cycle(report)
        return report

    def _log_debug(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_debug(message, **kwargs)

    def _log_info(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_info(message, **kwargs)

    def _log_warning(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_warning(message, **kwargs)

    def _log_error(self, message: str, **kwargs) -> None:
        if self.observer:
            self.observer.log_error(message, **kwargs)
