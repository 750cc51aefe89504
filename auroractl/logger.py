"""
Structured logging for auroractl.

Log records go to stderr, keeping stdout for the report, and optionally
to a daily file when a log directory is configured. The logger also
counts what a status run did: jobs listed, diffs attempted, dirty and
failed jobs.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from datetime import datetime
import json

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


class StructuredLogger:
    """Logger with key=value context and status run metrics."""

    def __init__(
        self,
        name: str = "auroractl",
        level: str = "INFO",
        log_dir: Optional[Union[str, Path]] = None,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Logger name
            level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for a daily log file; no file when None
            enable_console: Log to stderr
        """
        self.logger = logging.getLogger(name)
        self.logger.handlers.clear()
        self.logger.propagate = False
        self.log_file: Optional[Path] = None

        console_level = getattr(logging, level.upper())
        self.logger.setLevel(console_level)

        if enable_console:
            self._add_handler(logging.StreamHandler(sys.stderr), console_level, CONSOLE_FORMAT)

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / f"auroractl_{datetime.now():%Y%m%d}.log"
            # the file gets debug output even when the console does not
            self.logger.setLevel(logging.DEBUG)
            self._add_handler(
                logging.FileHandler(self.log_file, encoding="utf-8"), logging.DEBUG, FILE_FORMAT
            )

        self.metrics = {
            "files_processed": 0,
            "jobs_listed": 0,
            "jobs_selected": 0,
            "diffs_attempted": 0,
            "diffs_dirty": 0,
            "diffs_clean": 0,
            "diffs_failed": 0,
            "errors_by_type": {},
            "file_stats": {},
        }

    def _add_handler(self, handler: logging.Handler, level: int, fmt: str):
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
        self.logger.addHandler(handler)

    def log(self, level: int, message: str, **context):
        """Log a message; context is appended as JSON."""
        if context:
            message = f"{message} | Context: {json.dumps(context, sort_keys=True)}"
        self.logger.log(level, message)

    def debug(self, message: str, **context):
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self.log(logging.WARNING, message, **context)

    def error(self, message: str, **context):
        self.log(logging.ERROR, message, **context)

    def critical(self, message: str, **context):
        self.log(logging.CRITICAL, message, **context)

    # Metric tracking methods

    def _file_stats(self, config_file: str) -> dict:
        return self.metrics["file_stats"].setdefault(
            config_file, {"jobs": 0, "selected": 0, "dirty": 0, "failed": 0}
        )

    def record_file(self, config_file: str, listed: int, selected: int):
        """Record a processed config file and the size of its job listing."""
        self.metrics["files_processed"] += 1
        self.metrics["jobs_listed"] += listed
        self.metrics["jobs_selected"] += selected
        stats = self._file_stats(config_file)
        stats["jobs"] += listed
        stats["selected"] += selected

    def record_diff(self, config_file: str, dirty: bool):
        """Record a classified diff."""
        self.metrics["diffs_attempted"] += 1
        if dirty:
            self.metrics["diffs_dirty"] += 1
            self._file_stats(config_file)["dirty"] += 1
        else:
            self.metrics["diffs_clean"] += 1

    def record_diff_failure(self, config_file: str, error_type: str):
        """Record a diff that could not be classified."""
        self.metrics["diffs_attempted"] += 1
        self.metrics["diffs_failed"] += 1
        self._file_stats(config_file)["failed"] += 1
        self.record_error(error_type)

    def record_error(self, error_type: str):
        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics."""
        metrics_copy = json.loads(json.dumps(self.metrics))
        attempted = metrics_copy["diffs_attempted"]
        if attempted > 0:
            metrics_copy["dirty_rate"] = round(metrics_copy["diffs_dirty"] / attempted, 3)
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Status Run Metrics ===")
        self.info(f"Files: {metrics['files_processed']}")
        self.info(f"Jobs: {metrics['jobs_selected']}/{metrics['jobs_listed']} selected")
        self.info(
            f"Diffs: {metrics['diffs_attempted']} attempted, "
            f"{metrics['diffs_dirty']} dirty, {metrics['diffs_failed']} failed"
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_logger: Optional[StructuredLogger] = None


def configure_logger(**kwargs) -> StructuredLogger:
    """Replace the process-wide logger, e.g. once the CLI knows level and log dir."""
    global _logger
    _logger = StructuredLogger(**kwargs)
    return _logger


def get_logger() -> StructuredLogger:
    """Return the process-wide logger, creating a default one on first use."""
    if _logger is None:
        return configure_logger()
    return _logger


def reset_logger():
    global _logger
    _logger = None
