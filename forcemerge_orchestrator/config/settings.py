"""Typed settings for the force-merge orchestrator.

Every knob has the default the scheduler runs with when the YAML file omits it.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Node Resource Thresholds
# =============================================================================

class ResourceThresholdSettings(BaseModel):
    """Upper bounds above which the node is considered too busy to merge."""
    cpu_threshold_percent: float = Field(default=80.0, ge=0.0, le=100.0, description="Deny when CPU usage exceeds this percentage")
    mem_threshold_percent: float = Field(default=80.0, ge=0.0, le=100.0, description="Deny when OS memory usage exceeds this percentage")
    jvm_heap_threshold_percent: float = Field(default=80.0, ge=0.0, le=100.0, description="Deny when runtime heap usage exceeds this percentage")


# =============================================================================
# Shard Eligibility
# =============================================================================

class ShardEligibilitySettings(BaseModel):
    """Per-shard gates applied before a shard becomes a candidate."""
    translog_recency_threshold_millis: int = Field(default=30 * 60 * 1000, ge=0, description="Skip shards whose oldest unflushed operation is younger than this")
    min_segment_count: int = Field(default=2, ge=2, description="Skip shards with fewer segments than this")
    optimal_max_segments_count: int = Field(default=1, ge=1, description="Target segment count passed to the force merge")


# =============================================================================
# Scheduling
# =============================================================================

class SchedulingSettings(BaseModel):
    """Recurring timer and dedicated worker pool configuration."""
    enabled: bool = Field(default=True, description="Arm the periodic driver on start")
    interval_seconds: float = Field(default=60.0, gt=0.0, description="Delay between the end of one cycle and the start of the next")
    merge_pool_name: str = Field(default="force_merge", min_length=1, description="Name of the dedicated worker pool")
    merge_pool_size: int = Field(default=2, ge=2, le=16, description="Worker threads in the dedicated pool; the running cycle occupies one")


# =============================================================================
# Cluster
# =============================================================================

class ClusterSettings(BaseModel):
    """Cluster-level settings read by the default cluster config provider."""
    remote_store_enabled: bool = Field(default=False, description="Value of cluster.remote_store.enabled")
    node_id: Optional[str] = Field(default=None, description="Identifier of this node; defaults to the hostname")
    node_roles: List[str] = Field(default_factory=lambda: ["data"], description="Roles of this node")
    peer_roles: List[List[str]] = Field(default_factory=list, description="Roles of every other known node in the cluster")


# =============================================================================
# Logging
# =============================================================================

class LoggingSettings(BaseModel):
    """Structured logging configuration."""
    level: str = Field(default="INFO", description="Minimum log level")
    log_dir: Optional[str] = Field(default=None, description="Directory for rotating JSON logs; console only when unset")
    history_size: int = Field(default=100, ge=1, le=10000, description="Cycle reports and denials retained in memory")

    @model_validator(mode="after")
    def _validate_level(self) -> "LoggingSettings":
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{self.level}'. Must be one of: {sorted(valid_levels)}")
        self.level = self.level.upper()
        return self


class ForceMergeConfig(BaseModel):
    """Top-level config with unknown keys rejected so typos surface early."""

    model_config = ConfigDict(extra="forbid")

    thresholds: ResourceThresholdSettings = Field(default_factory=ResourceThresholdSettings)
    shards: ShardEligibilitySettings = Field(default_factory=ShardEligibilitySettings)
    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    cluster: ClusterSettings = Field(default_factory=ClusterSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def to_flat_dict(self) -> dict:
        """Flatten to `section.key` pairs for logging and CLI display."""
        flat = {}
        for section, values in self.model_dump().items():
            for key, value in values.items():
                flat[f"{section}.{key}"] = value
        return flat
