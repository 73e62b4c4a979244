"""
Tests for the ResourceHealthMonitor class.

Covers threshold ordering, boundary values, and freshness of readings.
"""

from unittest.mock import patch

import pytest

from forcemerge_orchestrator.config import ResourceThresholdSettings
from forcemerge_orchestrator.resources import (ResourceHealthMonitor,
                                               ResourceSnapshot)
from forcemerge_orchestrator.validation import DenialReason

from tests.fixtures import FakeStatsProvider, make_node_stats


def _snapshot(**overrides) -> ResourceSnapshot:
    return ResourceSnapshot.from_node_stats(make_node_stats(**overrides), "force_merge")


class TestResourceHealthMonitor:
    """Tests for the node health gate."""

    @pytest.mark.fast
    def test_healthy_node_allowed(self, monitor):
        assert monitor.evaluate(_snapshot()).allowed

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "overrides,reason",
        [
            ({"cpu_percent": 85.0}, DenialReason.CPU),
            ({"mem_used_percent": 80.1}, DenialReason.MEMORY),
            ({"heap_used_percent": 95.0}, DenialReason.JVM_HEAP),
            ({"gc_collections": 1}, DenialReason.GC_ACTIVE),
            ({"pool_active": 2, "pool_largest": 2}, DenialReason.NO_MERGE_THREADS),
            ({"include_pool": False}, DenialReason.NO_MERGE_THREADS),
        ],
    )
    def test_single_condition_denies(self, monitor, overrides, reason):
        outcome = monitor.evaluate(_snapshot(**overrides))
        assert outcome.reason is reason

    @pytest.mark.fast
    def test_threshold_equality_allowed(self, monitor):
        snapshot = _snapshot(cpu_percent=80.0, mem_used_percent=80.0, heap_used_percent=80.0)
        assert monitor.evaluate(snapshot).allowed

    @pytest.mark.fast
    def test_first_true_condition_wins(self, monitor):
        snapshot = _snapshot(
            cpu_percent=99.0,
            mem_used_percent=99.0,
            heap_used_percent=99.0,
            gc_collections=3,
            include_pool=False,
        )
        assert monitor.evaluate(snapshot).reason is DenialReason.CPU

        snapshot = _snapshot(heap_used_percent=99.0, gc_collections=3, include_pool=False)
        assert monitor.evaluate(snapshot).reason is DenialReason.JVM_HEAP

    @pytest.mark.fast
    def test_denial_detail_names_metric_value(self, monitor):
        outcome = monitor.evaluate(_snapshot(cpu_percent=85.0))
        assert outcome.detail == "CPU usage too high: 85.0%"

    @pytest.mark.fast
    def test_denial_recorded_with_snapshot(self, monitor, observer):
        with patch.object(observer.logger, "info") as mock_info:
            monitor.evaluate(_snapshot(mem_used_percent=90.0))

        assert observer.denials_for(DenialReason.MEMORY) == 1
        assert mock_info.call_args.kwargs["snapshot"]["mem_used_percent"] == 90.0

    @pytest.mark.fast
    def test_custom_thresholds_from_settings(self, observer):
        thresholds = ResourceThresholdSettings(cpu_threshold_percent=50.0)
        monitor = ResourceHealthMonitor.from_settings(FakeStatsProvider(), thresholds, observer=observer)
        assert monitor.evaluate(_snapshot(cpu_percent=60.0)).reason is DenialReason.CPU

    @pytest.mark.fast
    def test_check_takes_fresh_snapshot_each_call(self, monitor, stats_provider):
        stats_provider.queue(make_node_stats(cpu_percent=99.0))

        first = monitor.check()
        second = monitor.check()

        assert first.outcome.allowed
        assert second.outcome.reason is DenialReason.CPU
        assert stats_provider.calls == 2

    @pytest.mark.fast
    def test_pool_looked_up_by_name(self, observer):
        provider = FakeStatsProvider(make_node_stats(pool_name="other_pool"))
        monitor = ResourceHealthMonitor(provider, pool_name="force_merge", observer=observer)
        assert monitor.check().outcome.reason is DenialReason.NO_MERGE_THREADS

    @pytest.mark.fast
    def test_log_metrics(self, monitor, observer):
        snapshot = _snapshot(cpu_percent=12.34)
        with patch.object(observer, "log_info") as mock_log:
            monitor.log_metrics(snapshot)

        fields = mock_log.call_args.kwargs
        assert fields["cpu_percent"] == 12.3
        assert fields["pool_largest"] == 2
        assert fields["gc_active"] is False
