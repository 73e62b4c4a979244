"""
Per-cycle summary of what the candidate scheduler decided and did.

A report is produced for every cycle, including cycles that end at the
cluster gate or the first node health check, so the audit trail never has
silent gaps.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .validation import DenialReason, ValidationOutcome


class CycleOutcome(str, Enum):
    """How a maintenance cycle ended"""
    CLUSTER_INELIGIBLE = "cluster_ineligible"  # Gate denied, nothing else ran
    NODE_CONSTRAINED = "node_constrained"      # Initial health check denied
    NO_CANDIDATES = "no_candidates"            # Every shard was skipped
    COMPLETED = "completed"                    # Every candidate was attempted
    HALTED = "halted"                          # Recheck denied mid-batch
    ERRORED = "errored"                        # An unexpected error ended the cycle


def _new_cycle_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass
class CycleReport:
    """Container for the decisions and results of one cycle"""

    cycle_id: str = field(default_factory=_new_cycle_id)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None
    outcome: Optional[CycleOutcome] = None
    denial: Optional[ValidationOutcome] = None
    candidates: List[str] = field(default_factory=list)
    merged: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: Dict[str, DenialReason] = field(default_factory=dict)
    not_attempted: List[str] = field(default_factory=list)

    def finish(
        self, outcome: CycleOutcome, denial: Optional[ValidationOutcome] = None
    ) -> "CycleReport":
        self.outcome = outcome
        self.denial = denial
        self.finished_at = time.time()
        return self

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    @property
    def attempted(self) -> List[str]:
        """Shard ids whose merge was invoked, in invocation order"""
        done = set(self.merged) | set(self.failed)
        return [shard_id for shard_id in self.candidates if shard_id in done]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "outcome": self.outcome.value if self.outcome else None,
            "denial": self.denial.to_dict() if self.denial is not None else None,
            "duration_seconds": round(self.duration_seconds, 3)
            if self.duration_seconds is not None
            else None,
            "candidates": list(self.candidates),
            "merged": list(self.merged),
            "failed": dict(self.failed),
            "skipped": {k: v.value for k, v in self.skipped.items()},
            "not_attempted": list(self.not_attempted),
        }
