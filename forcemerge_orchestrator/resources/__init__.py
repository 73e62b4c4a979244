"""
Resources package for node health checks.

Provides the node resource snapshot model, a psutil-backed stats provider,
and the health monitor that gates every force merge.
"""

from .data_models import (
    GcCollectorStats,
    ThreadPoolStats,
    NodeStats,
    ResourceSnapshot,
)
from .node_stats import (
    NodeResourceStatsProvider,
    PsutilNodeStatsProvider,
    create_node_stats_provider,
)
from .health_monitor import HealthCheck, ResourceHealthMonitor

__all__ = [
    # Data models
    "GcCollectorStats",
    "ThreadPoolStats",
    "NodeStats",
    "ResourceSnapshot",
    # Providers
    "NodeResourceStatsProvider",
    "PsutilNodeStatsProvider",
    "create_node_stats_provider",
    # Monitor
    "HealthCheck",
    "ResourceHealthMonitor",
]
