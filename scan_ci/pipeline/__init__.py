"""Pipelines: diff partitioner and scan-result reporter."""

from .partition import (
    filter_source_paths,
    load_legacy_manifest,
    copy_files,
    partition_legacy,
    list_staged_files,
    run_prepare,
)
from .flatten import load_scan_results, normalize_file_name, flatten_scan_results
from .renderers import (
    render_csv,
    write_csv,
    build_table,
    render_markdown_table,
    render_summary,
    build_annotations,
    emit_annotations,
)
from .upload import extract_pr_number, build_upload_record, upload_report
from .report import process_scan_results

__all__ = [
    "filter_source_paths",
    "load_legacy_manifest",
    "copy_files",
    "partition_legacy",
    "list_staged_files",
    "run_prepare",
    "load_scan_results",
    "normalize_file_name",
    "flatten_scan_results",
    "render_csv",
    "write_csv",
    "build_table",
    "render_markdown_table",
    "render_summary",
    "build_annotations",
    "emit_annotations",
    "extract_pr_number",
    "build_upload_record",
    "upload_report",
    "process_scan_results",
]
