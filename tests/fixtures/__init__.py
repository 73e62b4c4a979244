"""
Shared Test Fixtures for the force-merge orchestrator

This package contains reusable test fixtures organized by category:
- fakes.py: In-memory providers, shards and a manual scheduling host
- components.py: Real validators and sinks wired to the fakes
"""

from .components import (
    observer,
    default_config,
    cluster_config,
    stats_provider,
    scheduling_host,
    gate,
    monitor,
    evaluator,
)
from .fakes import (
    GB,
    MINUTE_MILLIS,
    make_node_stats,
    FakeStatsProvider,
    FakeClusterConfig,
    FakeShard,
    FakeRegistry,
    ManualTimer,
    ManualSchedulingHost,
)

__all__ = [
    # Component fixtures
    "observer",
    "default_config",
    "cluster_config",
    "stats_provider",
    "scheduling_host",
    "gate",
    "monitor",
    "evaluator",

    # Fakes
    "GB",
    "MINUTE_MILLIS",
    "make_node_stats",
    "FakeStatsProvider",
    "FakeClusterConfig",
    "FakeShard",
    "FakeRegistry",
    "ManualTimer",
    "ManualSchedulingHost",
]
