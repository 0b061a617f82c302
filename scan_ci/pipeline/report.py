"""Scan-result reporter: flatten scanner output and fan it out to sinks."""

from pathlib import Path
from typing import Optional, Union

from ..config import CIContext, ReportConfig
from ..errors import PRNumberError, ScanResultError
from ..models import ReportResult, UploadOutcome
from ..tools import GitHubTool, SalesforceTool, StepSummary, WorkflowCommandSink
from ..utils import calculate_metrics, format_metrics_report, get_logger
from .flatten import flatten_scan_results, load_scan_results
from .renderers import (
    AnnotationSink,
    build_annotations,
    build_table,
    emit_annotations,
    render_summary,
    write_csv,
)
from .upload import upload_report


async def process_scan_results(
    json_path: Union[str, Path],
    csv_path: Union[str, Path],
    config: ReportConfig,
    ctx: CIContext,
    annotation_sink: Optional[AnnotationSink] = None,
    salesforce: Optional[SalesforceTool] = None,
    summary: Optional[StepSummary] = None,
) -> ReportResult:
    """
    Run the reporter over one scanner JSON file.

    Args:
        json_path: Scanner output
        csv_path: Where the CSV report goes
        config: Sink selection and table options
        ctx: CI environment snapshot
        annotation_sink: Where annotations go (default: workflow commands)
        salesforce: Record store wrapper for the upload sink
        summary: Step summary writer (default: GITHUB_STEP_SUMMARY)

    Returns:
        ReportResult with per-sink counters

    Raises:
        ScanResultError: The scanner output is unreadable or malformed, or it
            holds no violations while the CSV or table sink is selected
    """
    logger = get_logger()
    result = ReportResult()

    entries = load_scan_results(json_path)
    records = flatten_scan_results(entries, marker=config.source_marker)
    result.rows = len(records)
    logger.info(f"Flattened {len(entries)} files into {len(records)} violations from {json_path}")

    if not records:
        # CSV and table derive their header from the first record
        if config.write_csv or config.write_table:
            raise ScanResultError(
                f"No violations in {json_path}; cannot derive the report header"
            )
        logger.info("No violations found; nothing to annotate")
        return result

    summary = summary or StepSummary(ctx.step_summary)
    summary_markdown = ""

    # The upload reads the CSV back, so it is written first
    if config.write_csv:
        write_csv(records, csv_path)
        result.csv_path = str(csv_path)

    if config.write_table:
        table = build_table(
            records,
            marker_header=config.marker_header,
            marker=config.marker,
            excluded_columns=config.excluded_columns,
            replace_severity=config.replace_severity,
        )
        footer = format_metrics_report(calculate_metrics(records)) if config.include_metrics else None
        summary_markdown = render_summary(config.table_heading, table, footer)
        summary.write(summary_markdown)
        result.table_rows = len(table) - 1

    annotations = build_annotations(records)

    if config.emit_annotations:
        failures = await emit_annotations(annotations, annotation_sink or WorkflowCommandSink())
        result.annotation_failures = failures
        result.annotations_emitted = len(annotations) - len(failures)

    if config.post_check_run:
        result.check_run_posted = _publish_check_run(config, ctx, summary_markdown, annotations)

    if config.upload:
        if not result.csv_path:
            logger.warning("Upload selected without the CSV sink; skipping upload")
        else:
            try:
                result.upload = await upload_report(
                    result.csv_path,
                    ctx,
                    tool=salesforce or SalesforceTool(sobject=config.report_sobject),
                )
            except PRNumberError as e:
                logger.error(f"Upload aborted: {e}")
                result.upload = UploadOutcome.FAILED

    return result


def _publish_check_run(config: ReportConfig, ctx: CIContext, summary_markdown: str, annotations) -> bool:
    logger = get_logger()
    if not (ctx.token and ctx.repository and ctx.sha):
        logger.warning("Check run needs GITHUB_TOKEN, GITHUB_REPOSITORY and GITHUB_SHA; skipping")
        return False

    github = GitHubTool(repo=ctx.repository, head_sha=ctx.sha, token=ctx.token)
    return github.publish_check_run(
        name=config.table_heading,
        summary=summary_markdown or f"{len(annotations)} violations found",
        annotations=annotations,
    )
