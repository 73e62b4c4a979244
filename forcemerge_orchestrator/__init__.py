"""
Auto force-merge orchestrator.

Periodically force merges eligible primary shards on one node of a tiered
storage cluster, provided the cluster is tiered and the node has capacity.
"""

from _version import __version__, get_full_version, get_version_dict

from .cluster import (ClusterConfigProvider, ClusterEligibility,
                      ClusterEligibilityGate, DiscoveryNode,
                      SettingsClusterConfigProvider)
from .config import ForceMergeConfig, load_force_merge_config
from .cycle_report import CycleOutcome, CycleReport
from .exceptions import (ConfigurationError, ForceMergeError,
                         ForceMergeIOFailure, InvalidConfigurationError,
                         SchedulerStateError, ShardStatsError)
from .manager import AutoForceMergeManager
from .observability import ObservabilityManager, create_observability_manager
from .resources import (NodeResourceStatsProvider, PsutilNodeStatsProvider,
                        ResourceHealthMonitor, ResourceSnapshot)
from .scheduler import CandidateScheduler
from .scheduling import (DriverState, MonitoredThreadPool, PeriodicTaskDriver,
                         ScheduleHandle, SchedulingHost,
                         ThreadPoolSchedulingHost)
from .shards import (ShardCandidate, ShardEligibilityEvaluator, ShardHandle,
                     ShardRegistry, ShardStats)
from .validation import DenialCategory, DenialReason, ValidationOutcome

__all__ = [
    "__version__",
    "get_full_version",
    "get_version_dict",
    # Facade
    "AutoForceMergeManager",
    "CandidateScheduler",
    "CycleOutcome",
    "CycleReport",
    # Gates
    "ClusterConfigProvider",
    "ClusterEligibility",
    "ClusterEligibilityGate",
    "DiscoveryNode",
    "SettingsClusterConfigProvider",
    "NodeResourceStatsProvider",
    "PsutilNodeStatsProvider",
    "ResourceHealthMonitor",
    "ResourceSnapshot",
    "ShardCandidate",
    "ShardEligibilityEvaluator",
    "ShardHandle",
    "ShardRegistry",
    "ShardStats",
    "DenialCategory",
    "DenialReason",
    "ValidationOutcome",
    # Scheduling
    "DriverState",
    "MonitoredThreadPool",
    "PeriodicTaskDriver",
    "ScheduleHandle",
    "SchedulingHost",
    "ThreadPoolSchedulingHost",
    # Config and observability
    "ForceMergeConfig",
    "load_force_merge_config",
    "ObservabilityManager",
    "create_observability_manager",
    # Errors
    "ForceMergeError",
    "ForceMergeIOFailure",
    "ShardStatsError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "SchedulerStateError",
]
