"""
Tests for the AutoForceMergeManager facade.
"""

import pytest

from forcemerge_orchestrator.config import ForceMergeConfig
from forcemerge_orchestrator.cycle_report import CycleOutcome
from forcemerge_orchestrator.exceptions import SchedulerStateError
from forcemerge_orchestrator.manager import AutoForceMergeManager
from forcemerge_orchestrator.scheduling import DriverState

from tests.fixtures import FakeRegistry, FakeShard


@pytest.fixture
def make_manager(cluster_config, stats_provider, scheduling_host, observer):
    managers = []

    def _make(shards=(), config=None):
        manager = AutoForceMergeManager(
            config or ForceMergeConfig(),
            FakeRegistry(shards),
            cluster_provider=cluster_config,
            stats_provider=stats_provider,
            host=scheduling_host,
            observer=observer,
        )
        managers.append(manager)
        return manager

    yield _make
    for manager in managers:
        manager.stop()


class TestAutoForceMergeManager:

    @pytest.mark.fast
    def test_not_armed_until_started(self, make_manager, scheduling_host):
        manager = make_manager()

        assert manager.driver.state is DriverState.IDLE
        assert scheduling_host.pending == []

    @pytest.mark.fast
    def test_start_arms_with_configured_interval(self, make_manager, scheduling_host):
        config = ForceMergeConfig(scheduling={"interval_seconds": 15})
        manager = make_manager(config=config)

        assert manager.start() is True
        assert scheduling_host.pending[0].delay_seconds == 15.0

    @pytest.mark.fast
    def test_disabled_scheduling_never_arms(self, make_manager, scheduling_host):
        manager = make_manager(config=ForceMergeConfig(scheduling={"enabled": False}))

        assert manager.start() is False
        assert scheduling_host.pending == []

    @pytest.mark.fast
    def test_run_once(self, make_manager):
        manager = make_manager([FakeShard("s1"), FakeShard("s2", segment_count=1)])

        report = manager.run_once()

        assert report.outcome is CycleOutcome.COMPLETED
        assert report.merged == ["s1"]

    @pytest.mark.fast
    def test_timer_cycle_merges(self, make_manager, scheduling_host):
        shard = FakeShard("s1")
        manager = make_manager([shard])
        manager.start()

        scheduling_host.fire_next()

        assert shard.merge_calls == [1]
        assert manager.observer.last_cycle().merged == ["s1"]
        assert len(scheduling_host.pending) == 1

    @pytest.mark.fast
    def test_stop_then_run_once_rejected(self, make_manager):
        manager = make_manager()
        manager.start()
        manager.stop()

        assert manager.pool.is_shutdown
        with pytest.raises(SchedulerStateError):
            manager.run_once()

    @pytest.mark.fast
    def test_context_manager(self, make_manager, scheduling_host):
        manager = make_manager()
        with manager as running:
            assert running.driver.state is DriverState.SCHEDULED

        assert manager.driver.state is DriverState.CANCELLED
        assert scheduling_host.timers[0].cancelled

    @pytest.mark.fast
    def test_status(self, make_manager):
        manager = make_manager([FakeShard("s1")])
        manager.run_once()

        status = manager.status()

        assert status["state"] == "idle"
        assert status["schedule"]["cycles_completed"] == 1
        assert status["pool"]["name"] == "force_merge"
        assert status["decisions"]["shards_merged"] == 1
