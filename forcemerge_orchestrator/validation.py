"""
Uniform validation outcome shared by the cluster gate, the node health
monitor, and the shard evaluator.

A denial is not an error: it carries a reason that the scheduler logs and
records, and each reason belongs to exactly one denial category.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DenialCategory(str, Enum):
    """Which eligibility dimension produced a denial"""
    CLUSTER_INELIGIBLE = "cluster_ineligible"
    NODE_RESOURCE_CONSTRAINED = "node_resource_constrained"
    SHARD_INELIGIBLE = "shard_ineligible"


class DenialReason(str, Enum):
    """Enumerated causes for a denied validation"""

    # Cluster
    REMOTE_STORAGE_DISABLED = "REMOTE_STORAGE_DISABLED"
    NO_WARM_NODE = "NO_WARM_NODE"

    # Node resources
    CPU = "CPU"
    MEMORY = "MEMORY"
    JVM_HEAP = "JVM_HEAP"
    GC_ACTIVE = "GC_ACTIVE"
    NO_MERGE_THREADS = "NO_MERGE_THREADS"

    # Shard
    NOT_PRIMARY = "NOT_PRIMARY"
    TOO_FEW_SEGMENTS = "TOO_FEW_SEGMENTS"
    TRANSLOG_TOO_RECENT = "TRANSLOG_TOO_RECENT"
    SEGMENT_SIZE_TOO_LARGE = "SEGMENT_SIZE_TOO_LARGE"

    @property
    def category(self) -> DenialCategory:
        return _CATEGORY_BY_REASON[self]


_CATEGORY_BY_REASON = {
    DenialReason.REMOTE_STORAGE_DISABLED: DenialCategory.CLUSTER_INELIGIBLE,
    DenialReason.NO_WARM_NODE: DenialCategory.CLUSTER_INELIGIBLE,
    DenialReason.CPU: DenialCategory.NODE_RESOURCE_CONSTRAINED,
    DenialReason.MEMORY: DenialCategory.NODE_RESOURCE_CONSTRAINED,
    DenialReason.JVM_HEAP: DenialCategory.NODE_RESOURCE_CONSTRAINED,
    DenialReason.GC_ACTIVE: DenialCategory.NODE_RESOURCE_CONSTRAINED,
    DenialReason.NO_MERGE_THREADS: DenialCategory.NODE_RESOURCE_CONSTRAINED,
    DenialReason.NOT_PRIMARY: DenialCategory.SHARD_INELIGIBLE,
    DenialReason.TOO_FEW_SEGMENTS: DenialCategory.SHARD_INELIGIBLE,
    DenialReason.TRANSLOG_TOO_RECENT: DenialCategory.SHARD_INELIGIBLE,
    DenialReason.SEGMENT_SIZE_TOO_LARGE: DenialCategory.SHARD_INELIGIBLE,
}


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of one eligibility check"""

    allowed: bool
    reason: Optional[DenialReason] = None
    detail: str = ""

    def __post_init__(self):
        if self.allowed and self.reason is not None:
            raise ValueError("An allowed outcome cannot carry a denial reason")
        if not self.allowed and self.reason is None:
            raise ValueError("A denied outcome requires a denial reason")

    @classmethod
    def allow(cls) -> "ValidationOutcome":
        return _ALLOWED

    @classmethod
    def deny(cls, reason: DenialReason, detail: str = "") -> "ValidationOutcome":
        return cls(allowed=False, reason=reason, detail=detail)

    @property
    def category(self) -> Optional[DenialCategory]:
        return self.reason.category if self.reason else None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary for logging"""
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "category": self.category.value if self.category else None,
            "detail": self.detail or None,
        }


_ALLOWED = ValidationOutcome(allowed=True)
