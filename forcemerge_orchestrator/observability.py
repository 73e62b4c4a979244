"""
Integrated Observability Manager for the force-merge orchestrator

The manager is the single sink handed to every component. It forwards
messages to the structured logger and keeps a bounded, thread-safe record of
denials and cycle reports so that operators and tests can inspect what the
scheduler decided without scraping log output.
"""

import threading
from collections import Counter, deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Union

from .cycle_report import CycleReport
from .logger import ProductionLogger, get_logger
from .validation import DenialCategory, DenialReason, ValidationOutcome


class ObservabilityManager:
    """
    Unified observability sink for maintenance decisions.

    Features:
    - Structured logging with node correlation
    - Denial counters per reason and a window of recent denials
    - Bounded history of cycle reports
    - Summary for status endpoints and the CLI
    """

    def __init__(
        self,
        logger: Optional[ProductionLogger] = None,
        history_size: int = 100,
    ):
        """
        Initialize observability manager

        Args:
            logger: Structured logger. A console logger for this host is created if not provided.
            history_size: Number of cycle reports and denials retained
        """
        self.logger = logger or get_logger()
        self.node_id = self.logger.get_node_id()

        self._lock = threading.Lock()
        self.denial_counts: Counter = Counter()
        self.recent_denials: Deque[ValidationOutcome] = deque(maxlen=history_size)
        self.cycle_history: Deque[CycleReport] = deque(maxlen=history_size)
        self.outcome_counts: Counter = Counter()

    def log_debug(self, message: str, **kwargs) -> None:
        """Log debug message with structured data"""
        self.logger.debug(message, **kwargs)

    def log_info(self, message: str, **kwargs) -> None:
        """Log info message with structured data"""
        self.logger.info(message, **kwargs)

    def log_warning(self, message: str, **kwargs) -> None:
        """Log warning message with structured data"""
        self.logger.warning(message, **kwargs)

    def log_error(self, message: str, **kwargs) -> None:
        """Log error message with structured data"""
        self.logger.error(message, **kwargs)

    def log_exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback"""
        self.logger.exception(message, **kwargs)

    def record_denial(self, outcome: ValidationOutcome, **context) -> None:
        """Count a denial and log it with its reason and category"""
        if outcome.allowed:
            return
        with self._lock:
            self.denial_counts[outcome.reason] += 1
            self.recent_denials.append(outcome)

        message = f"Force merge denied: {outcome.reason.value}"
        if outcome.detail:
            message = f"{message} ({outcome.detail})"
        fields = {**outcome.to_dict(), **context}
        # Per-shard skips are routine and would flood INFO on large nodes
        if outcome.category is DenialCategory.SHARD_INELIGIBLE:
            self.logger.debug(message, **fields)
        else:
            self.logger.info(message, **fields)

    def record_cycle(self, report: CycleReport) -> None:
        """Append a finished cycle report to the history and log it"""
        with self._lock:
            self.cycle_history.append(report)
            if report.outcome is not None:
                self.outcome_counts[report.outcome] += 1
        self.logger.info("Force merge cycle finished", **report.to_dict())

    def last_denial(self) -> Optional[ValidationOutcome]:
        with self._lock:
            return self.recent_denials[-1] if self.recent_denials else None

    def last_cycle(self) -> Optional[CycleReport]:
        with self._lock:
            return self.cycle_history[-1] if self.cycle_history else None

    def denials_for(self, reason: DenialReason) -> int:
        with self._lock:
            return self.denial_counts[reason]

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of decisions taken so far"""
        with self._lock:
            cycles: List[CycleReport] = list(self.cycle_history)
            return {
                "node_id": self.node_id,
                "cycles_recorded": len(cycles),
                "outcomes": {k.value: v for k, v in self.outcome_counts.items()},
                "denials": {k.value: v for k, v in self.denial_counts.items()},
                "shards_merged": sum(len(c.merged) for c in cycles),
                "shards_failed": sum(len(c.failed) for c in cycles),
                "last_outcome": cycles[-1].outcome.value
                if cycles and cycles[-1].outcome
                else None,
            }

    def close(self) -> None:
        """Close observability manager and cleanup resources"""
        self.logger.close()


def create_observability_manager(
    node_id: Optional[str] = None,
    log_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
) -> ObservabilityManager:
    """
    Factory function to create a configured observability manager

    Args:
        node_id: Optional node ID. Defaults to the hostname.
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Optional directory for rotating JSON logs

    Returns:
        Configured ObservabilityManager instance
    """
    return ObservabilityManager(
        logger=get_logger(node_id=node_id, log_level=log_level, log_dir=log_dir)
    )
