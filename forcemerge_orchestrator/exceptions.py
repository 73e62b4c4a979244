"""
Structured exception hierarchy with execution context for the force-merge orchestrator.

All exceptions include:
- correlation_id: Trace a failure across the log lines of one maintenance cycle
- execution_context: Node, cycle, shard, configuration
- resolution_hints: Actionable suggestions for common issues
- severity: CRITICAL, ERROR, RECOVERABLE, WARNING
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


class ErrorSeverity(str, Enum):
    """Error severity levels for triage and alerting"""
    CRITICAL = "critical"      # Node destabilized, maintenance must stop
    ERROR = "error"            # Requires operator intervention
    RECOVERABLE = "recoverable"  # Transient failure, next cycle may succeed
    WARNING = "warning"        # Non-blocking issue


class ErrorCategory(str, Enum):
    """Error categories for diagnostics and resolution routing"""
    MERGE = "merge"                    # Storage engine rejected or failed a merge
    CONFIGURATION = "configuration"    # Invalid config, missing parameters
    RESOURCE = "resource"              # Memory, CPU, heap, worker exhaustion
    CLUSTER = "cluster"                # Topology or cluster settings unreadable
    SHARD = "shard"                    # Shard stats unreadable or inconsistent
    STATE = "state"                    # Scheduler state machine misuse


@dataclass
class ExecutionContext:
    """Execution context for error diagnosis"""

    node_id: Optional[str] = None
    cycle_id: Optional[str] = None
    shard_id: Optional[str] = None
    index_name: Optional[str] = None

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    elapsed_seconds: Optional[float] = None

    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize context for logging"""
        return {
            k: v for k, v in self.__dict__.items()
            if v is not None and not k.startswith('_')
        }

    def format_summary(self) -> str:
        """Human-readable one-line summary"""
        parts = []
        if self.node_id:
            parts.append(f"node={self.node_id}")
        if self.cycle_id:
            parts.append(f"cycle={self.cycle_id}")
        if self.shard_id:
            parts.append(f"shard={self.shard_id}")
        if self.correlation_id:
            parts.append(f"correlation_id={self.correlation_id}")
        return " | ".join(parts)


@dataclass
class ResolutionHint:
    """Actionable resolution guidance for common error patterns"""

    title: str
    description: str
    steps: List[str]
    documentation_url: Optional[str] = None
    estimated_resolution_time: Optional[str] = None


class ForceMergeError(Exception):
    """
    Base exception for the force-merge orchestrator with structured context.

    All orchestrator exceptions inherit from this class so that the driver can
    log them with consistent diagnostic information.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[ExecutionContext] = None,
        category: ErrorCategory = ErrorCategory.MERGE,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        resolution_hints: Optional[List[ResolutionHint]] = None,
        original_exception: Optional[BaseException] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ExecutionContext()
        self.category = category
        self.severity = severity
        self.resolution_hints = resolution_hints or []
        self.original_exception = original_exception
        self.additional_data = kwargs

    def format_diagnostic_message(self) -> str:
        """
        Format a multi-line diagnostic message for logs and operator display.

        Includes the message and severity, the execution context, resolution
        hints, and the original exception if one was wrapped.
        """
        lines = [
            f"{'='*80}",
            f"ERROR: {self.message}",
            f"Severity: {self.severity.value.upper()} | Category: {self.category.value}",
            f"{'='*80}",
            "",
            "EXECUTION CONTEXT:",
        ]

        context_dict = self.context.to_dict()
        for key, value in context_dict.items():
            if key == 'metadata' and isinstance(value, dict):
                for meta_key, meta_value in value.items():
                    lines.append(f"  {meta_key}: {meta_value}")
            else:
                lines.append(f"  {key}: {value}")

        if self.resolution_hints:
            lines.append("")
            lines.append("RESOLUTION HINTS:")
            for i, hint in enumerate(self.resolution_hints, 1):
                lines.append(f"\n{i}. {hint.title}")
                lines.append(f"   {hint.description}")
                if hint.steps:
                    lines.append("   Steps:")
                    for step in hint.steps:
                        lines.append(f"     - {step}")
                if hint.documentation_url:
                    lines.append(f"   Docs: {hint.documentation_url}")
                if hint.estimated_resolution_time:
                    lines.append(f"   Est. Time: {hint.estimated_resolution_time}")

        if self.original_exception:
            lines.append("")
            lines.append("ORIGINAL EXCEPTION:")
            lines.append(f"  {type(self.original_exception).__name__}: {str(self.original_exception)}")

        lines.append("")
        lines.append(f"{'='*80}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for structured logging"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "resolution_hints": [
                {
                    "title": hint.title,
                    "description": hint.description,
                    "steps": hint.steps,
                    "documentation_url": hint.documentation_url,
                    "estimated_time": hint.estimated_resolution_time
                }
                for hint in self.resolution_hints
            ],
            "original_exception": str(self.original_exception) if self.original_exception else None,
            **self.additional_data
        }

    def __str__(self) -> str:
        summary = self.context.format_summary()
        return f"{self.message} [{summary}]" if summary else self.message


# Merge Errors
class ForceMergeIOFailure(ForceMergeError):
    """The storage engine failed to force merge one shard"""
    def __init__(
        self,
        message: str,
        shard_id: Optional[str] = None,
        max_segments: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.pop("context", None) or ExecutionContext()
        if shard_id and not context.shard_id:
            context.shard_id = shard_id
        if max_segments is not None:
            context.metadata["max_segments"] = max_segments
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Inspect Shard Store",
                    description="The merge failed inside the storage engine; the shard is retried next cycle",
                    steps=[
                        "Check the node's disk space and file descriptor limits",
                        "Look for corruption markers in the shard directory",
                        "Confirm the shard is not being relocated",
                    ],
                    estimated_resolution_time="next cycle"
                )
            ]
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.MERGE,
            severity=ErrorSeverity.RECOVERABLE,
            **kwargs
        )
        self.shard_id = context.shard_id


# Shard Errors
class ShardStatsError(ForceMergeError):
    """Shard statistics could not be read"""
    def __init__(self, message: str, shard_id: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or ExecutionContext()
        if shard_id and not context.shard_id:
            context.shard_id = shard_id
        super().__init__(
            message,
            context=context,
            category=ErrorCategory.SHARD,
            severity=ErrorSeverity.WARNING,
            **kwargs
        )


# Configuration Errors
class ConfigurationError(ForceMergeError):
    """Configuration-related errors"""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)


class InvalidConfigurationError(ConfigurationError):
    """Invalid configuration parameter or structure"""
    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        **kwargs
    ):
        if config_path:
            message = f"{message} (config_path: {config_path})"
        if invalid_value is not None:
            message = f"{message} (value: {invalid_value})"
        if "resolution_hints" not in kwargs:
            kwargs["resolution_hints"] = [
                ResolutionHint(
                    title="Fix Force-Merge Configuration",
                    description="The configuration file or an AFM_ override failed validation",
                    steps=[
                        "Open config/force_merge_config.yaml",
                        "Check thresholds are percentages between 0 and 100",
                        "Check AFM_* environment overrides for typos",
                        "Validate: forcemerge config --config <path>",
                    ],
                    estimated_resolution_time="5 minutes"
                )
            ]
        super().__init__(message, severity=ErrorSeverity.ERROR, **kwargs)


# State Errors
class SchedulerStateError(ForceMergeError):
    """Illegal transition requested on the periodic driver"""
    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.STATE,
            severity=ErrorSeverity.ERROR,
            **kwargs
        )
