"""
Structured JSON Logging for the Auto Force-Merge Orchestrator

Provides structured JSON logs with node correlation so that maintenance
decisions from many nodes can be aggregated and traced back to their origin.
"""

import json
import logging
import socket
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs"""

    def __init__(self, node_id: str):
        super().__init__()
        self.node_id = node_id

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "node_id": self.node_id,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }

        if record.exc_info:
            # Ensure exc_info is a tuple; logger.makeRecord may receive True if misused
            exc_info = (
                record.exc_info if isinstance(record.exc_info, tuple) else sys.exc_info()
            )
            if exc_info and isinstance(exc_info, tuple):
                log_data["exception"] = {
                    "type": exc_info[0].__name__ if exc_info[0] else None,
                    "message": str(exc_info[1]) if exc_info[1] else None,
                    "traceback": self.formatException(exc_info),
                }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ProductionLogger:
    """
    Production logger with structured JSON output and node correlation.

    Features:
    - Structured JSON logging for machine parsing (when a log directory is set)
    - Node ID correlation for tracing decisions across a cluster
    - Human-readable console output
    - Automatic log rotation to prevent disk exhaustion
    - Context-aware logging with custom fields
    """

    def __init__(
        self,
        node_id: Optional[str] = None,
        log_level: str = "INFO",
        log_dir: Optional[Union[str, Path]] = None,
        console: bool = True,
    ):
        """
        Initialize production logger

        Args:
            node_id: Identifier of the node this logger reports for. Defaults to the hostname.
            log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for the rotating JSON log file. No file output when None.
            console: Whether to also emit human-readable output to stderr
        """
        self.node_id = node_id or socket.gethostname()
        self.log_level = getattr(logging, log_level.upper())
        self.log_dir = Path(log_dir) if log_dir else None
        self.console = console
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Setup console and optional rotating file logging"""
        self.logger = logging.getLogger(f"forcemerge.{self.node_id}")
        self.logger.setLevel(self.log_level)

        # Prevent duplicate handlers if logger already exists
        if self.logger.handlers:
            return

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

            # JSON file handler with rotation (10MB, keep 10 files)
            json_handler = RotatingFileHandler(
                self.log_dir / "forcemerge.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
            )
            json_handler.setFormatter(JSONFormatter(self.node_id))
            json_handler.setLevel(self.log_level)
            self.logger.addHandler(json_handler)

        if self.console:
            console_handler = logging.StreamHandler()
            console_formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            console_handler.setFormatter(console_formatter)
            console_handler.setLevel(self.log_level)
            self.logger.addHandler(console_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

        # Prevent propagation to root logger
        self.logger.propagate = False

    def log_event(self, level: str, message: str, **kwargs) -> None:
        """
        Log structured event with additional context

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            message: Human-readable log message
            **kwargs: Additional structured data to include in JSON
        """
        levelno = getattr(logging, level.upper())
        if not self.logger.isEnabledFor(levelno):
            return

        record = self.logger.makeRecord(
            name=self.logger.name,
            level=levelno,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=None,
        )
        record.extra_data = kwargs
        self.logger.handle(record)

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message"""
        self.log_event("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message"""
        self.log_event("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message"""
        self.log_event("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message"""
        self.log_event("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback"""
        record = self.logger.makeRecord(
            name=self.logger.name,
            level=logging.ERROR,
            fn="",
            lno=0,
            msg=message,
            args=(),
            # Capture current exception info tuple explicitly
            exc_info=sys.exc_info(),
        )
        record.extra_data = kwargs
        self.logger.handle(record)

    def get_node_id(self) -> str:
        """Get the node ID for this logger instance"""
        return self.node_id

    def close(self) -> None:
        """Close all handlers and cleanup"""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)


def get_logger(
    node_id: Optional[str] = None,
    log_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> ProductionLogger:
    """
    Factory function to get a configured production logger

    Args:
        node_id: Optional node ID. Defaults to the hostname.
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Optional directory for rotating JSON logs
        console: Emit human-readable output to stderr

    Returns:
        Configured ProductionLogger instance
    """
    return ProductionLogger(
        node_id=node_id, log_level=log_level, log_dir=log_dir, console=console
    )
