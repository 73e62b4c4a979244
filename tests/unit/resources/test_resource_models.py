"""
Tests for resource data models.
"""

import pytest

from forcemerge_orchestrator.resources import (ResourceSnapshot,
                                               ThreadPoolStats)

from tests.fixtures import GB, make_node_stats


class TestThreadPoolStats:

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "active,largest,expected",
        [(0, 2, True), (1, 2, True), (2, 2, False), (0, 0, False)],
    )
    def test_has_headroom(self, active, largest, expected):
        stats = ThreadPoolStats(name="force_merge", threads=largest, active=active, largest=largest, queue=0)
        assert stats.has_headroom is expected


class TestResourceSnapshot:

    @pytest.mark.fast
    def test_from_node_stats(self):
        snapshot = ResourceSnapshot.from_node_stats(
            make_node_stats(cpu_percent=33.3, mem_free_bytes=5 * GB, gc_collections=2),
            "force_merge",
        )
        assert snapshot.cpu_percent == 33.3
        assert snapshot.mem_free_bytes == 5 * GB
        assert snapshot.gc_active is True
        assert snapshot.merge_worker_headroom is True
        assert snapshot.thread_pool.name == "force_merge"

    @pytest.mark.fast
    def test_missing_pool_means_no_headroom(self):
        snapshot = ResourceSnapshot.from_node_stats(make_node_stats(include_pool=False), "force_merge")
        assert snapshot.merge_worker_headroom is False
        assert snapshot.thread_pool is None

    @pytest.mark.fast
    def test_to_dict_rounds_percentages(self):
        snapshot = ResourceSnapshot.from_node_stats(make_node_stats(cpu_percent=12.345), "force_merge")
        data = snapshot.to_dict()
        assert data["cpu_percent"] == 12.3
        assert data["thread_pool"]["largest"] == 2
