"""Error hierarchy for the scan CI helpers.

Lower-level steps raise these; the subcommand handlers in ``main`` catch
``ScanCIError``, log a diagnostic and decide whether the run aborts.

  CommitRangeError   fatal   -- no usable diff range
  GitCommandError    fatal   -- git diff failed while listing files
  FileMoveError      fatal   -- legacy partition aborted mid-way
  ScanResultError    fatal   -- scanner JSON missing, malformed or empty
  PRNumberError      upload  -- upload aborted, report run continues
  RecordStoreError   upload  -- logged and swallowed by the upload step
"""

from typing import Optional, Sequence


class ScanCIError(RuntimeError):
    """Base for all scan CI helper errors."""


class CommitRangeError(ScanCIError):
    """The commit range for the diff could not be resolved."""


class GitCommandError(ScanCIError):
    """A git command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(
            f"'{' '.join(self.command)}' exited with status {returncode}{detail}"
        )


class FileMoveError(ScanCIError):
    """Moving a file into the legacy staging directory failed."""

    def __init__(self, source: str, destination: str, reason: Optional[str] = None):
        self.source = source
        self.destination = destination
        message = f"Failed to move {source} -> {destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ScanResultError(ScanCIError):
    """Scanner output could not be read or has an unexpected shape."""


class PRNumberError(ScanCIError):
    """No pull request number could be extracted from the ref."""


class RecordStoreError(ScanCIError):
    """The Salesforce CLI failed or returned unusable output."""
