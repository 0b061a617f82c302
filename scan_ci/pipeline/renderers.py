"""Report renderers: CSV file, step summary table, inline annotations."""

import asyncio
import csv
import io
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence, Union

from ..errors import ScanResultError
from ..models import Annotation, ViolationRecord
from ..utils import get_logger


DEFAULT_EXCLUDED_COLUMNS = ("endLine", "endColumn", "url")
FAILED_MARKER = ":x:"


class AnnotationSink(Protocol):
    async def emit(self, annotation: Annotation) -> None:
        ...


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


# --- CSV ------------------------------------------------------------------

def render_csv(records: Sequence[ViolationRecord]) -> str:
    """
    Serialize records to CSV text.

    The header is the first record's field names; records are assumed
    field-homogeneous, missing values render empty.

    Raises:
        ScanResultError: No records, so no header can be derived
    """
    if not records:
        raise ScanResultError("Cannot derive a CSV header from an empty result set")

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=records[0].keys(),
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    for record in records:
        writer.writerow(record.as_dict())
    return buffer.getvalue()


def write_csv(records: Sequence[ViolationRecord], path: Union[str, Path]) -> str:
    """Write records to a CSV file and return the text written."""
    text = render_csv(records)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    get_logger().info(f"Converted {len(records)} violations to CSV at {path}")
    return text


# --- Summary table --------------------------------------------------------

def build_table(
    records: Sequence[ViolationRecord],
    marker_header: str = FAILED_MARKER,
    marker: str = FAILED_MARKER,
    excluded_columns: Sequence[str] = DEFAULT_EXCLUDED_COLUMNS,
    replace_severity: bool = False,
) -> List[List[str]]:
    """
    Build the summary table: a header row followed by one row per record.

    Every row starts with the marker column, since only failures are
    reported. Columns follow the first record's field order minus the
    excluded ones. ``ruleName`` links to the rule documentation; with
    ``replace_severity`` the severity column shows ``normalizedSeverity``.

    Raises:
        ScanResultError: No records, so no header can be derived
    """
    if not records:
        raise ScanResultError("Cannot derive a table header from an empty result set")

    excluded = set(excluded_columns)
    columns = [key for key in records[0].keys() if key not in excluded]

    rows = [[marker_header, *columns]]
    for record in records:
        row = [marker]
        for key in columns:
            if key == "ruleName":
                url = record.url
                row.append(f"<a href='{url}'>{record.rule_name}</a>" if url else _cell(record.rule_name))
            elif key == "severity" and replace_severity:
                normalized = record.normalized_severity
                row.append(_cell(normalized if normalized is not None else record.severity))
            else:
                row.append(_cell(record.get(key)))
        rows.append(row)

    return rows


def _markdown_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\r\n", "<br>").replace("\n", "<br>")


def render_markdown_table(table: Sequence[Sequence[str]]) -> str:
    """Render a header-first table as a GitHub-flavoured Markdown table."""
    if not table:
        return ""

    header, *body = table
    lines = [
        "| " + " | ".join(_markdown_cell(c) for c in header) + " |",
        "| " + " | ".join("---" for _ in header) + " |",
    ]
    for row in body:
        lines.append("| " + " | ".join(_markdown_cell(c) for c in row) + " |")
    return "\n".join(lines)


def render_summary(
    heading: str,
    table: Sequence[Sequence[str]],
    footer: Optional[str] = None,
) -> str:
    """Render a heading, the table and an optional footer block."""
    parts = [f"## {heading}", "", render_markdown_table(table), ""]
    if footer:
        parts.extend([footer, ""])
    return "\n".join(parts)


# --- Annotations ----------------------------------------------------------

def build_annotations(records: Sequence[ViolationRecord], level: str = "error") -> List[Annotation]:
    """One annotation per record, titled with the rule name."""
    return [
        Annotation(
            title=_cell(record.rule_name),
            message=record.message,
            file=record.file_name,
            start_line=record.line,
            end_line=record.end_line,
            start_column=record.column,
            end_column=record.end_column,
            level=level,
        )
        for record in records
    ]


async def emit_annotations(
    annotations: Sequence[Annotation],
    sink: AnnotationSink,
) -> List[str]:
    """
    Emit all annotations concurrently.

    Every emission is awaited; a failure on one does not stop the rest.

    Returns:
        Descriptions of the annotations that failed
    """
    logger = get_logger()
    results = await asyncio.gather(
        *(sink.emit(a) for a in annotations),
        return_exceptions=True,
    )

    failures = []
    for annotation, result in zip(annotations, results):
        if isinstance(result, BaseException):
            failure = f"{annotation.file}:{annotation.start_line} {annotation.title}: {result}"
            logger.error(f"Failed to emit annotation {failure}")
            failures.append(failure)

    logger.info(f"Emitted {len(annotations) - len(failures)}/{len(annotations)} annotations")
    return failures
