"""
Wiring for the automatic force-merge service on one node.

`AutoForceMergeManager` builds every component from a `ForceMergeConfig`,
owns the dedicated worker pool and exposes the lifecycle used by the host
process: start, stop, run one cycle on demand, and report status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .cluster import (ClusterConfigProvider, ClusterEligibilityGate,
                      SettingsClusterConfigProvider)
from .config import ForceMergeConfig, load_force_merge_config
from .cycle_report import CycleReport
from .logger import get_logger
from .observability import ObservabilityManager
from .resources import (NodeResourceStatsProvider, ResourceHealthMonitor,
                        create_node_stats_provider)
from .scheduler import CandidateScheduler
from .scheduling import (MonitoredThreadPool, PeriodicTaskDriver,
                         SchedulingHost, ThreadPoolSchedulingHost)
from .shards import ShardEligibilityEvaluator, ShardRegistry


class AutoForceMergeManager:
    """
    Facade over the scheduler and its periodic driver.

    Providers default to the psutil node stats provider and the settings
    based cluster provider; pass fakes or engine-backed implementations to
    override them.
    """

    def __init__(
        self,
        config: ForceMergeConfig,
        registry: ShardRegistry,
        *,
        cluster_provider: Optional[ClusterConfigProvider] = None,
        stats_provider: Optional[NodeResourceStatsProvider] = None,
        host: Optional[SchedulingHost] = None,
        observer: Optional[ObservabilityManager] = None,
    ):
        self.config = config
        self.observer = observer or ObservabilityManager(
            logger=get_logger(
                node_id=config.cluster.node_id,
                log_level=config.logging.level,
                log_dir=config.logging.log_dir,
            ),
            history_size=config.logging.history_size,
        )

        scheduling = config.scheduling
        self.pool = MonitoredThreadPool(scheduling.merge_pool_name, scheduling.merge_pool_size)
        self.stats_provider = stats_provider or create_node_stats_provider([self.pool])
        self.cluster_provider = cluster_provider or SettingsClusterConfigProvider.from_settings(
            config.cluster
        )

        self.gate = ClusterEligibilityGate(self.cluster_provider, observer=self.observer)
        self.monitor = ResourceHealthMonitor.from_settings(
            self.stats_provider,
            config.thresholds,
            pool_name=scheduling.merge_pool_name,
            observer=self.observer,
        )
        self.evaluator = ShardEligibilityEvaluator.from_settings(config.shards, observer=self.observer)
        self.scheduler = CandidateScheduler(
            self.gate,
            self.monitor,
            self.evaluator,
            registry,
            optimal_max_segments_count=config.shards.optimal_max_segments_count,
            observer=self.observer,
        )
        self.driver = PeriodicTaskDriver(
            self.scheduler.run_cycle,
            host or ThreadPoolSchedulingHost(self.pool),
            interval_seconds=scheduling.interval_seconds,
            observer=self.observer,
            autostart=False,
        )

    @classmethod
    def from_config_file(
        cls,
        registry: ShardRegistry,
        config_path: Optional[Union[str, Path]] = None,
        **kwargs,
    ) -> "AutoForceMergeManager":
        return cls(load_force_merge_config(config_path), registry, **kwargs)

    def start(self) -> bool:
        """Arm the periodic driver unless scheduling is disabled."""
        if not self.config.scheduling.enabled:
            self.observer.log_info("Auto force merge disabled by configuration")
            return False
        return self.driver.start()

    def stop(self) -> None:
        """Stop future cycles and release the worker pool without waiting."""
        self.driver.stop()
        self.pool.shutdown(wait=False)

    def run_once(self) -> CycleReport:
        """Run one cycle now, in the calling thread."""
        return self.driver.trigger_now()

    def status(self) -> Dict[str, Any]:
        pool_stats = self.pool.stats()
        return {
            "state": self.driver.state.value,
            "schedule": self.driver.handle.to_dict(),
            "pool": {
                "name": pool_stats.name,
                "threads": pool_stats.threads,
                "active": pool_stats.active,
                "largest": pool_stats.largest,
                "queue": pool_stats.queue,
            },
            "decisions": self.observer.get_summary(),
        }

    def __enter__(self) -> "AutoForceMergeManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
