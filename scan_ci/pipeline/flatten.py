"""Load scanner JSON and flatten it to one record per violation."""

import json
import re
from pathlib import Path
from typing import Iterable, List, Union

from ..errors import ScanResultError
from ..models import ScanResultEntry, ViolationRecord


def load_scan_results(path: Union[str, Path]) -> List[ScanResultEntry]:
    """
    Read the scanner's JSON output.

    Args:
        path: Path to the JSON array written by the scanner

    Returns:
        Per-file entries in file order

    Raises:
        ScanResultError: File unreadable, not JSON, or not an array of entries
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ScanResultError(f"Cannot read scan results {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ScanResultError(f"Scan results {path} are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ScanResultError(f"Scan results {path} must be a JSON array, got {type(data).__name__}")

    return [ScanResultEntry.from_dict(item, index=i) for i, item in enumerate(data)]


def normalize_file_name(file_name: str, marker: str = "force-app") -> str:
    """
    Cut everything before the application-source root.

    ``/home/runner/work/repo/force-app/main/default/classes/Foo.cls``
    becomes ``force-app/main/default/classes/Foo.cls``.

    The marker must be a whole path segment, so a checkout directory such
    as ``sfdx-force-app`` is not mistaken for the source root.
    """
    match = re.search(rf"(?:^|[\\/])({re.escape(marker)}(?:[\\/].*)?)$", file_name)
    if not match:
        raise ScanResultError(f"File name {file_name!r} is outside the {marker} source root")
    return match.group(1)


def flatten_scan_results(
    entries: Iterable[ScanResultEntry],
    marker: str = "force-app",
) -> List[ViolationRecord]:
    """
    Flatten per-file entries into one record per violation.

    Entry order and violation order are preserved. Each record starts with
    ``engine`` and the normalized ``fileName``, followed by the violation's
    own fields; ``message`` is whitespace-trimmed.

    Args:
        entries: Scanner entries
        marker: Application-source root marker

    Returns:
        Flattened violation records
    """
    records = []
    for entry in entries:
        if not entry.violations:
            continue

        file_name = normalize_file_name(entry.file_name, marker)
        for violation in entry.violations:
            row = {"engine": entry.engine, "fileName": file_name}
            row.update(violation)
            # Violation keys never override the entry-level ones
            row["engine"] = entry.engine
            row["fileName"] = file_name
            row["message"] = str(violation.get("message", "")).strip()
            records.append(ViolationRecord.from_mapping(row))

    return records
