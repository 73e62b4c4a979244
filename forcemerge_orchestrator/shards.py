"""
Per-shard eligibility for force merges.

Only primary shards that are fragmented, quiet, and small enough to merge
without pressuring the page cache become candidates. Candidates are ordered
by translog age so the staliest shards are merged first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (TYPE_CHECKING, Any, Dict, Iterable, Optional, Protocol,
                    runtime_checkable)

from .validation import DenialReason, ValidationOutcome

if TYPE_CHECKING:
    from .config import ShardEligibilitySettings
    from .observability import ObservabilityManager

THIRTY_MINUTES_IN_MILLIS = 30 * 60 * 1000


@dataclass(frozen=True)
class ShardStats:
    """Stats of one locally hosted shard, read once per cycle."""

    shard_id: str
    is_primary: bool
    segment_count: int
    translog_age_millis: int
    segment_bytes: int
    index_name: Optional[str] = None
    translog_uncommitted_bytes: Optional[int] = None
    current_merges: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@runtime_checkable
class ShardHandle(Protocol):
    """A shard owned by the storage engine."""

    shard_id: str
    is_primary: bool

    def stats(self) -> ShardStats:
        ...

    def force_merge(self, max_segments: int) -> None:
        """Merge down to `max_segments`; raises ForceMergeIOFailure on failure."""
        ...


@runtime_checkable
class ShardRegistry(Protocol):
    def primary_shards(self) -> Iterable[ShardHandle]:
        ...


@dataclass(frozen=True)
class ShardCandidate:
    """An eligible primary shard queued for a force merge in this cycle."""

    shard_id: str
    segment_count: int
    translog_age_millis: int
    estimated_segment_bytes: int
    is_primary: bool
    handle: ShardHandle

    def __post_init__(self):
        if not self.is_primary:
            raise ValueError(f"Replica shard {self.shard_id} cannot be a force merge candidate")
        if self.segment_count < 0:
            raise ValueError("segment_count must be >= 0")

    @classmethod
    def from_stats(cls, stats: ShardStats, handle: ShardHandle) -> "ShardCandidate":
        return cls(
            shard_id=stats.shard_id,
            segment_count=stats.segment_count,
            translog_age_millis=stats.translog_age_millis,
            estimated_segment_bytes=stats.segment_bytes,
            is_primary=stats.is_primary,
            handle=handle,
        )


class ShardEligibilityEvaluator:
    """Decides whether one shard should be force merged this cycle."""

    def __init__(
        self,
        translog_recency_threshold_millis: int = THIRTY_MINUTES_IN_MILLIS,
        min_segment_count: int = 2,
        observer: Optional["ObservabilityManager"] = None,
    ):
        self.translog_recency_threshold_millis = translog_recency_threshold_millis
        self.min_segment_count = min_segment_count
        self.observer = observer

    @classmethod
    def from_settings(
        cls,
        settings: "ShardEligibilitySettings",
        observer: Optional["ObservabilityManager"] = None,
    ) -> "ShardEligibilityEvaluator":
        return cls(
            translog_recency_threshold_millis=settings.translog_recency_threshold_millis,
            min_segment_count=settings.min_segment_count,
            observer=observer,
        )

    @staticmethod
    def sort_key(stats: ShardStats) -> int:
        return stats.translog_age_millis

    def evaluate(self, stats: ShardStats, available_memory_bytes: int) -> ValidationOutcome:
        outcome = self._evaluate(stats, available_memory_bytes)
        if not outcome.allowed and self.observer:
            self.observer.record_denial(outcome, shard_id=stats.shard_id, shard=stats.to_dict())
        return outcome

    def _evaluate(self, stats: ShardStats, available_memory_bytes: int) -> ValidationOutcome:
        if not stats.is_primary:
            return ValidationOutcome.deny(
                DenialReason.NOT_PRIMARY, f"Shard {stats.shard_id} is a replica"
            )

        if stats.segment_count < self.min_segment_count:
            return ValidationOutcome.deny(
                DenialReason.TOO_FEW_SEGMENTS,
                f"Shard {stats.shard_id} has {stats.segment_count} segment(s)",
            )

        if stats.translog_age_millis < self.translog_recency_threshold_millis:
            return ValidationOutcome.deny(
                DenialReason.TRANSLOG_TOO_RECENT,
                f"Shard {stats.shard_id} translog is {stats.translog_age_millis}ms old",
            )

        if stats.segment_bytes >= available_memory_bytes:
            return ValidationOutcome.deny(
                DenialReason.SEGMENT_SIZE_TOO_LARGE,
                f"Shard {stats.shard_id} segments ({stats.segment_bytes} bytes) "
                f"exceed available memory ({available_memory_bytes} bytes)",
            )

        return ValidationOutcome.allow()
