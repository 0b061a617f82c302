"""Data models for the diff partitioner."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class CommitRange:
    """A pair of git references bounding a diff."""
    base: str
    head: str

    def __str__(self) -> str:
        return f"{self.base}...{self.head}"


@dataclass(frozen=True)
class FileMoveRecord:
    """A relocation performed by the legacy partitioner."""
    source: str
    destination: str

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination}"


@dataclass
class PrepareResult:
    """Outcome of one prepare run."""
    commit_range: Optional[CommitRange]
    modified_files: List[str] = field(default_factory=list)  # staged under modified dir
    new_files: List[str] = field(default_factory=list)       # staged under new dir
    legacy_files: List[str] = field(default_factory=list)    # post-move paths
    skipped: bool = False  # Non-PR run under the skip policy

    @property
    def total_staged(self) -> int:
        return len(self.modified_files) + len(self.new_files) + len(self.legacy_files)
