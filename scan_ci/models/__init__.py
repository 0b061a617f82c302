"""Data models for scan CI helpers."""

from .violation import ScanResultEntry, ViolationRecord, Annotation
from .partition import CommitRange, FileMoveRecord, PrepareResult
from .report import UploadOutcome, UploadRecord, ReportResult

__all__ = [
    "ScanResultEntry",
    "ViolationRecord",
    "Annotation",
    "CommitRange",
    "FileMoveRecord",
    "PrepareResult",
    "UploadOutcome",
    "UploadRecord",
    "ReportResult",
]
