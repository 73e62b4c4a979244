"""
Tests for ValidationOutcome and the denial taxonomy.
"""

import pytest

from forcemerge_orchestrator.validation import (DenialCategory, DenialReason,
                                                ValidationOutcome)


class TestValidationOutcome:
    """Tests for ValidationOutcome construction and helpers."""

    @pytest.mark.fast
    def test_allow_is_truthy_without_reason(self):
        outcome = ValidationOutcome.allow()
        assert outcome.allowed is True
        assert outcome.reason is None
        assert outcome.category is None
        assert bool(outcome) is True

    @pytest.mark.fast
    def test_deny_carries_reason_and_detail(self):
        outcome = ValidationOutcome.deny(DenialReason.CPU, "CPU usage too high: 91.0%")
        assert outcome.allowed is False
        assert outcome.reason is DenialReason.CPU
        assert outcome.detail == "CPU usage too high: 91.0%"
        assert not outcome

    @pytest.mark.fast
    def test_allowed_outcome_rejects_reason(self):
        with pytest.raises(ValueError):
            ValidationOutcome(allowed=True, reason=DenialReason.CPU)

    @pytest.mark.fast
    def test_denied_outcome_requires_reason(self):
        with pytest.raises(ValueError):
            ValidationOutcome(allowed=False)

    @pytest.mark.fast
    def test_to_dict(self):
        data = ValidationOutcome.deny(DenialReason.NO_WARM_NODE, "No warm node").to_dict()
        assert data == {
            "allowed": False,
            "reason": "NO_WARM_NODE",
            "category": "cluster_ineligible",
            "detail": "No warm node",
        }

    @pytest.mark.fast
    def test_outcome_is_immutable(self):
        outcome = ValidationOutcome.deny(DenialReason.MEMORY)
        with pytest.raises(AttributeError):
            outcome.allowed = True


class TestDenialReason:
    """Every reason belongs to exactly one category."""

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "reason,category",
        [
            (DenialReason.REMOTE_STORAGE_DISABLED, DenialCategory.CLUSTER_INELIGIBLE),
            (DenialReason.NO_WARM_NODE, DenialCategory.CLUSTER_INELIGIBLE),
            (DenialReason.CPU, DenialCategory.NODE_RESOURCE_CONSTRAINED),
            (DenialReason.MEMORY, DenialCategory.NODE_RESOURCE_CONSTRAINED),
            (DenialReason.JVM_HEAP, DenialCategory.NODE_RESOURCE_CONSTRAINED),
            (DenialReason.GC_ACTIVE, DenialCategory.NODE_RESOURCE_CONSTRAINED),
            (DenialReason.NO_MERGE_THREADS, DenialCategory.NODE_RESOURCE_CONSTRAINED),
            (DenialReason.NOT_PRIMARY, DenialCategory.SHARD_INELIGIBLE),
            (DenialReason.TOO_FEW_SEGMENTS, DenialCategory.SHARD_INELIGIBLE),
            (DenialReason.TRANSLOG_TOO_RECENT, DenialCategory.SHARD_INELIGIBLE),
            (DenialReason.SEGMENT_SIZE_TOO_LARGE, DenialCategory.SHARD_INELIGIBLE),
        ],
    )
    def test_category(self, reason, category):
        assert reason.category is category
        assert ValidationOutcome.deny(reason).category is category

    @pytest.mark.fast
    def test_all_reasons_mapped(self):
        for reason in DenialReason:
            assert isinstance(reason.category, DenialCategory)
