"""Utility functions."""

from .logging import setup_logging, get_logger, log_group, running_in_actions
from .metrics import (
    ReportMetrics,
    calculate_metrics,
    format_metrics_report,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_group",
    "running_in_actions",
    "ReportMetrics",
    "calculate_metrics",
    "format_metrics_report",
]
