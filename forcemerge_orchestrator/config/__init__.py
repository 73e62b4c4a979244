"""Configuration module for the force-merge orchestrator.

Submodules:
    - paths: Project root and default config path
    - settings: Pydantic settings models
    - loader: YAML loading with AFM_ environment overrides
"""

from .paths import (
    get_project_root,
    get_default_config_path,
)

from .settings import (
    ResourceThresholdSettings,
    ShardEligibilitySettings,
    SchedulingSettings,
    ClusterSettings,
    LoggingSettings,
    ForceMergeConfig,
)

from .loader import config_from_dict, load_force_merge_config

__all__ = [
    # Paths
    "get_project_root",
    "get_default_config_path",
    # Settings
    "ResourceThresholdSettings",
    "ShardEligibilitySettings",
    "SchedulingSettings",
    "ClusterSettings",
    "LoggingSettings",
    "ForceMergeConfig",
    # Loader
    "load_force_merge_config",
    "config_from_dict",
]
