"""Configuration for the scan CI helpers."""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Tuple
import os


PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


class NonPRPolicy(Enum):
    """What the range resolver does outside a pull request."""
    FALLBACK = "fallback"  # Diff the two most recent commits
    SKIP = "skip"          # Nothing to do, exit cleanly


class ReportMode(Enum):
    """Which sink preset the reporter runs."""
    AUTO = "auto"      # legacy if the JSON path says so
    LEGACY = "legacy"  # CSV + summary table + upload
    NORMAL = "normal"  # inline annotations


@dataclass(frozen=True)
class CIContext:
    """Snapshot of the CI environment, read once per run."""

    base_ref: str = ""
    head_ref: str = ""
    ref: str = ""
    event_name: str = ""
    sha: str = ""
    repository: str = ""
    token: Optional[str] = None
    step_summary: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CIContext":
        """Create context from GitHub Actions environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            base_ref=env.get("GITHUB_BASE_REF", ""),
            head_ref=env.get("GITHUB_HEAD_REF", ""),
            ref=env.get("GITHUB_REF", ""),
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            sha=env.get("GITHUB_SHA", ""),
            repository=env.get("GITHUB_REPOSITORY", ""),
            token=env.get("GITHUB_TOKEN") or None,
            step_summary=env.get("GITHUB_STEP_SUMMARY") or None,
        )

    @property
    def is_pull_request(self) -> bool:
        return self.event_name in PULL_REQUEST_EVENTS


@dataclass
class PrepareConfig:
    """Configuration for the diff partitioner."""

    # Paths
    source_marker: str = "force-app"               # Application-source identifier
    manifest_path: str = ".ci/legacy-files.txt"
    modified_dir: str = "modified-files-to-scan"
    new_dir: str = "new-files-to-scan"
    legacy_dir: str = "legacy-files-to-scan"
    work_dir: Path = field(default_factory=Path.cwd)

    # Range resolution
    remote: str = "origin"                         # Empty string: compare local refs
    non_pr_policy: NonPRPolicy = NonPRPolicy.FALLBACK

    # git diff --diff-filter values
    modified_filter: str = "MCR"  # Modified, copied, renamed
    added_filter: str = "A"


@dataclass
class ReportConfig:
    """Configuration for the scan-result reporter."""

    mode: ReportMode = ReportMode.NORMAL
    source_marker: str = "force-app"

    # Sinks
    write_csv: bool = False
    write_table: bool = False
    emit_annotations: bool = True
    upload: bool = False
    post_check_run: bool = False  # Needs GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_SHA

    # Summary table
    table_heading: str = "SF(DX) Scanner Results"
    marker_header: str = ":x:"
    marker: str = ":x:"
    excluded_columns: Tuple[str, ...] = ("endLine", "endColumn", "url")
    replace_severity: bool = False  # Show normalizedSeverity in the severity column
    include_metrics: bool = True

    # Upload
    report_sobject: str = "ContentVersion"

    @classmethod
    def for_mode(cls, mode: ReportMode, json_path: str = "") -> "ReportConfig":
        """Return the sink preset for a mode, resolving AUTO from the JSON path."""
        if mode == ReportMode.AUTO:
            mode = ReportMode.LEGACY if "legacy" in str(json_path) else ReportMode.NORMAL

        if mode == ReportMode.LEGACY:
            return replace(DEFAULT_LEGACY_REPORT_CONFIG)
        return replace(DEFAULT_REPORT_CONFIG)


# Default configurations
DEFAULT_PREPARE_CONFIG = PrepareConfig()
DEFAULT_REPORT_CONFIG = ReportConfig()
DEFAULT_LEGACY_REPORT_CONFIG = ReportConfig(
    mode=ReportMode.LEGACY,
    write_csv=True,
    write_table=True,
    emit_annotations=False,
    upload=True,
    table_heading="Legacy Code: SF(DX) Scanner Results",
    marker_header="PASSED?",
    excluded_columns=("endLine", "endColumn", "url", "normalizedSeverity"),
    replace_severity=True,
)
