"""Data models for scanner output and flattened violations."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..errors import ScanResultError


@dataclass
class ScanResultEntry:
    """One per-file entry of the scanner's JSON output."""
    engine: str
    file_name: str
    violations: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "ScanResultEntry":
        """Build an entry from the scanner's ``{engine, fileName, violations}`` object."""
        if not isinstance(data, dict):
            raise ScanResultError(f"Entry {index} is not an object")

        missing = [key for key in ("engine", "fileName", "violations") if key not in data]
        if missing:
            raise ScanResultError(f"Entry {index} is missing {', '.join(missing)}")

        violations = data["violations"]
        if not isinstance(violations, list) or not all(isinstance(v, dict) for v in violations):
            raise ScanResultError(f"Entry {index} has a malformed violations list")

        return cls(
            engine=str(data["engine"]),
            file_name=str(data["fileName"]),
            violations=violations,
        )


@dataclass(frozen=True)
class ViolationRecord:
    """
    A single flattened finding.

    Fields are kept as an ordered tuple of (name, value) pairs so CSV
    headers and table columns follow the scanner's own field order.
    """
    fields: Tuple[Tuple[str, Any], ...]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ViolationRecord":
        return cls(fields=tuple(data.items()))

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.fields)

    def keys(self) -> List[str]:
        return [name for name, _ in self.fields]

    def get(self, name: str, default: Any = None) -> Any:
        for key, value in self.fields:
            if key == name:
                return value
        return default

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self.fields)

    @property
    def engine(self) -> str:
        return self.get("engine", "")

    @property
    def file_name(self) -> str:
        return self.get("fileName", "")

    @property
    def rule_name(self) -> str:
        return self.get("ruleName", "")

    @property
    def message(self) -> str:
        return self.get("message", "")

    @property
    def url(self) -> Optional[str]:
        return self.get("url")

    @property
    def severity(self) -> Union[int, str, None]:
        return self.get("severity")

    @property
    def normalized_severity(self) -> Optional[str]:
        return self.get("normalizedSeverity")

    @property
    def line(self) -> Optional[int]:
        return self.get("line")

    @property
    def column(self) -> Optional[int]:
        return self.get("column")

    @property
    def end_line(self) -> Optional[int]:
        return self.get("endLine")

    @property
    def end_column(self) -> Optional[int]:
        return self.get("endColumn")


@dataclass(frozen=True)
class Annotation:
    """An inline source-position annotation for the CI run."""
    title: str
    message: str
    file: str
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    start_column: Optional[int] = None
    end_column: Optional[int] = None
    level: str = "error"  # error, warning, notice
