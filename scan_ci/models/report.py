"""Data models for the scan-result reporter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class UploadOutcome(Enum):
    """Result of the report upload step."""
    UPLOADED = "uploaded"   # New record created
    SKIPPED = "skipped"     # Matching record already present
    FAILED = "failed"       # Store error, logged and swallowed
    DISABLED = "disabled"   # Upload sink not selected


@dataclass(frozen=True)
class UploadRecord:
    """A report prepared for the Salesforce record store."""
    title: str            # <reportName>_PR<number>_<hash>
    path_on_client: str
    payload: str          # base64-encoded CSV
    content_hash: str
    pr_number: str
    sobject: str = "ContentVersion"


@dataclass
class ReportResult:
    """Counters from one report run."""
    rows: int = 0
    csv_path: Optional[str] = None
    table_rows: int = 0
    annotations_emitted: int = 0
    annotation_failures: List[str] = field(default_factory=list)
    upload: UploadOutcome = UploadOutcome.DISABLED
    check_run_posted: bool = False

    @property
    def uploaded(self) -> bool:
        return self.upload == UploadOutcome.UPLOADED

    @property
    def upload_skipped(self) -> bool:
        return self.upload == UploadOutcome.SKIPPED
