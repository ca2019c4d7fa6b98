"""
Structured logging for the posted-jobs store.

Console and daily-file output, keyword context rendered as JSON, plus
counters describing what the store decided during one pipeline run.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


METRIC_KEYS = (
    "checks",
    "active_hits",
    "archive_hits",
    "reopenings_allowed",
    "duplicates_blocked",
    "identifiers_archived",
    "archive_failures",
    "emergency_trims",
    "saves",
)


def resolve_level(level) -> int:
    """Map a level name to its logging constant; unknown names fall back to INFO."""
    resolved = getattr(logging, str(level).upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks dedup and archival counters for the current run.
    """

    def __init__(
        self,
        name: str = "postedjobs",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        log_level = resolve_level(level)
        self.logger.setLevel(log_level)
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {key: 0 for key in METRIC_KEYS}

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"postedjobs_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # file always gets everything
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking

    def record(self, metric: str, amount: int = 1):
        """Increment a run counter."""
        if metric not in self.metrics:
            raise KeyError(f"Unknown metric: {metric}")
        self.metrics[metric] += amount

    def get_metrics(self) -> dict:
        """Return a copy of the counters with the derived block rate."""
        metrics_copy = self.metrics.copy()
        decided = metrics_copy["duplicates_blocked"] + metrics_copy["reopenings_allowed"]
        metrics_copy["block_rate"] = (
            round(metrics_copy["duplicates_blocked"] / decided, 3) if decided else 0.0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Posted Jobs Store Metrics ===")
        self.info(
            f"Checks: {metrics['checks']} "
            f"(active hits {metrics['active_hits']}, archive hits {metrics['archive_hits']})"
        )
        self.info(
            f"Archive decisions: {metrics['duplicates_blocked']} blocked, "
            f"{metrics['reopenings_allowed']} reopened"
        )
        self.info(f"Archived identifiers: {metrics['identifiers_archived']}")
        self.info(f"Saves: {metrics['saves']}")

        if metrics["archive_failures"] or metrics["emergency_trims"]:
            self.warning(
                "Degraded operations this run",
                archive_failures=metrics["archive_failures"],
                emergency_trims=metrics["emergency_trims"],
            )


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "postedjobs",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level; defaults to POSTEDJOBS_LOG_LEVEL or INFO
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        level = level or os.getenv("POSTEDJOBS_LOG_LEVEL", "INFO")
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
