#!/usr/bin/env python3
"""
scan-ci - Main Entry Point

CI helpers around the Salesforce code scanner:

    scan-ci prepare                      # stage changed files, split out legacy ones
    scan-ci report [json] [csv]          # turn scanner JSON into CSV, summary, annotations
    scan-ci init [path]                  # add the scan workflow to a repository

Or via GitHub Actions (see .github/workflows/sfdx-scan.yml written by init)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import CIContext, NonPRPolicy, PrepareConfig, ReportConfig, ReportMode
from .errors import ScanCIError
from .pipeline import process_scan_results, run_prepare
from .utils import setup_logging, get_logger


def cmd_init(args):
    """Handle 'init' subcommand."""
    from .cli import init_repository

    target = Path(args.path) if args.path else Path.cwd()
    success = init_repository(target)
    sys.exit(0 if success else 1)


def cmd_prepare(args):
    """Handle 'prepare' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    config = PrepareConfig(
        source_marker=args.source_marker,
        manifest_path=args.manifest,
        modified_dir=args.modified_dir,
        new_dir=args.new_dir,
        legacy_dir=args.legacy_dir,
        remote=args.remote,
        non_pr_policy=NonPRPolicy(args.non_pr),
    )
    ctx = CIContext.from_env()

    try:
        result = asyncio.run(run_prepare(config, ctx))
    except ScanCIError as e:
        logger.error(f"Prepare failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Prepare failed: {e}")
        sys.exit(1)

    if result.skipped:
        logger.info("Not a pull request; skipping differential scan preparation")
    else:
        logger.info(
            f"Staged {len(result.modified_files)} modified, {len(result.new_files)} new "
            f"and {len(result.legacy_files)} legacy files from {result.commit_range}"
        )
    sys.exit(0)


def cmd_report(args):
    """Handle 'report' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    config = ReportConfig.for_mode(ReportMode(args.mode), args.json_file)
    config.source_marker = args.source_marker
    if args.no_upload:
        config.upload = False
    if args.check_run:
        config.post_check_run = True
    if args.annotations:
        config.emit_annotations = True

    ctx = CIContext.from_env()

    try:
        result = asyncio.run(process_scan_results(args.json_file, args.csv_file, config, ctx))
    except ScanCIError as e:
        logger.error(f"Error processing scan results: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Error processing scan results: {e}")
        sys.exit(1)

    logger.info(
        f"Report complete: {result.rows} violations, "
        f"{result.annotations_emitted} annotations, upload {result.upload.value}"
    )
    if result.annotation_failures:
        logger.warning(f"{len(result.annotation_failures)} annotations could not be emitted")
    sys.exit(0)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="CI helpers for Salesforce code scanning"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Add the scan workflow to a repository")
    init_parser.add_argument(
        "path",
        nargs="?",
        help="Target repository path (default: current directory)"
    )

    # prepare command
    prepare_parser = subparsers.add_parser(
        "prepare",
        help="Stage changed files for scanning and split out legacy files"
    )
    prepare_parser.add_argument(
        "--manifest",
        type=str,
        default=".ci/legacy-files.txt",
        help="Legacy file manifest (default: .ci/legacy-files.txt)"
    )
    prepare_parser.add_argument(
        "--source-marker",
        type=str,
        default="force-app",
        help="Application source directory name (default: force-app)"
    )
    prepare_parser.add_argument(
        "--remote",
        type=str,
        default="origin",
        help="Remote prefix for pull request refs, empty for local refs (default: origin)"
    )
    prepare_parser.add_argument(
        "--non-pr",
        type=str,
        default="fallback",
        choices=[p.value for p in NonPRPolicy],
        help="Outside pull requests: diff the last two commits or skip (default: fallback)"
    )
    prepare_parser.add_argument(
        "--modified-dir",
        type=str,
        default="modified-files-to-scan",
        help="Staging directory for modified files"
    )
    prepare_parser.add_argument(
        "--new-dir",
        type=str,
        default="new-files-to-scan",
        help="Staging directory for added files"
    )
    prepare_parser.add_argument(
        "--legacy-dir",
        type=str,
        default="legacy-files-to-scan",
        help="Staging directory for legacy files"
    )
    prepare_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    # report command
    report_parser = subparsers.add_parser(
        "report",
        help="Convert scanner JSON into CSV, step summary, annotations and uploads"
    )
    report_parser.add_argument(
        "json_file",
        nargs="?",
        default="scan-results.json",
        help="Scanner JSON output (default: scan-results.json)"
    )
    report_parser.add_argument(
        "csv_file",
        nargs="?",
        default="scan-results.csv",
        help="CSV report path (default: scan-results.csv)"
    )
    report_parser.add_argument(
        "--mode",
        type=str,
        default="auto",
        choices=[m.value for m in ReportMode],
        help="Sink preset; auto picks legacy when the JSON path contains 'legacy' (default: auto)"
    )
    report_parser.add_argument(
        "--source-marker",
        type=str,
        default="force-app",
        help="Application source directory name (default: force-app)"
    )
    report_parser.add_argument(
        "--no-upload",
        action="store_true",
        help="Don't upload the legacy report to Salesforce"
    )
    report_parser.add_argument(
        "--annotations",
        action="store_true",
        help="Also emit inline annotations in legacy mode"
    )
    report_parser.add_argument(
        "--check-run",
        action="store_true",
        help="Publish results as a GitHub check run (needs GITHUB_TOKEN)"
    )
    report_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    # Route to subcommand
    if args.command == "init":
        cmd_init(args)
    elif args.command == "prepare":
        cmd_prepare(args)
    elif args.command == "report":
        cmd_report(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
