"""Metrics calculation utilities for scan reports."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..models import ViolationRecord


@dataclass
class ReportMetrics:
    """Violation counts derived from a flattened scan result."""

    total_violations: int = 0
    files_affected: int = 0
    rules_triggered: int = 0

    # Breakdowns, ordered by count descending
    by_engine: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    top_rules: List[tuple] = field(default_factory=list)  # (rule, count)


def calculate_metrics(
    records: Sequence[ViolationRecord],
    top_n: int = 5
) -> ReportMetrics:
    """
    Calculate report metrics from flattened violations.

    Args:
        records: Flattened violation records
        top_n: How many of the most frequent rules to keep

    Returns:
        ReportMetrics object with calculated statistics
    """
    engines = Counter(r.engine for r in records)
    # normalizedSeverity when the scanner produced one, else the raw value
    severities = Counter(
        str(r.normalized_severity if r.normalized_severity is not None else r.severity)
        for r in records
    )
    rules = Counter(r.rule_name for r in records)

    return ReportMetrics(
        total_violations=len(records),
        files_affected=len({r.file_name for r in records}),
        rules_triggered=len(rules),
        by_engine=dict(engines.most_common()),
        by_severity=dict(severities.most_common()),
        top_rules=rules.most_common(top_n),
    )


def format_metrics_report(metrics: ReportMetrics) -> str:
    """
    Format metrics as a Markdown block for the step summary.

    Args:
        metrics: ReportMetrics object

    Returns:
        Formatted report string
    """
    lines = [
        "### Summary",
        f"- Violations: {metrics.total_violations}",
        f"- Files affected: {metrics.files_affected}",
        f"- Rules triggered: {metrics.rules_triggered}",
    ]

    if metrics.by_severity:
        lines.append("")
        lines.append("### Severity Breakdown")
        for severity, count in metrics.by_severity.items():
            lines.append(f"- {severity}: {count}")

    if metrics.by_engine:
        lines.append("")
        lines.append("### Engines")
        for engine, count in metrics.by_engine.items():
            lines.append(f"- {engine}: {count}")

    if metrics.top_rules:
        lines.append("")
        lines.append("### Most Frequent Rules")
        for rule, count in metrics.top_rules:
            lines.append(f"- {rule}: {count}")

    return "\n".join(lines)
