"""Upload the legacy scan report to Salesforce, skipping duplicates."""

import base64
import hashlib
import re
from pathlib import Path
from typing import Optional, Union

from ..config import CIContext
from ..errors import PRNumberError, RecordStoreError
from ..models import UploadOutcome, UploadRecord
from ..tools import SalesforceTool
from ..utils import get_logger


PR_REF_PATTERN = re.compile(r"refs/pull/(\d+)/merge")


def extract_pr_number(ref: Optional[str]) -> Optional[str]:
    """Extract the PR number from a ref such as ``refs/pull/42/merge``."""
    if not ref:
        return None
    match = PR_REF_PATTERN.search(ref)
    return match.group(1) if match else None


def content_hash(text: str) -> str:
    """MD5 hex digest of the report text, used only as a dedup key."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def build_upload_record(
    csv_path: Union[str, Path],
    csv_text: str,
    pr_number: str,
    sobject: str = "ContentVersion",
) -> UploadRecord:
    """
    Prepare the record for a report.

    The title is ``<report name>_PR<number>_<hash>`` where the report name
    is the CSV file name without its extension.
    """
    digest = content_hash(csv_text)
    report_name = Path(csv_path).stem
    return UploadRecord(
        title=f"{report_name}_PR{pr_number}_{digest}",
        path_on_client=str(csv_path),
        payload=base64.b64encode(csv_text.encode("utf-8")).decode("ascii"),
        content_hash=digest,
        pr_number=pr_number,
        sobject=sobject,
    )


async def upload_report(
    csv_path: Union[str, Path],
    ctx: CIContext,
    tool: Optional[SalesforceTool] = None,
) -> UploadOutcome:
    """
    Upload a CSV report unless an identical one exists for this PR.

    Args:
        csv_path: Rendered CSV report
        ctx: CI environment snapshot (GITHUB_REF carries the PR number)
        tool: Salesforce CLI wrapper

    Returns:
        UPLOADED, SKIPPED, or FAILED when the record store errored

    Raises:
        PRNumberError: The ref does not name a pull request
    """
    logger = get_logger()
    tool = tool or SalesforceTool()

    pr_number = extract_pr_number(ctx.ref)
    if not pr_number:
        raise PRNumberError(f"Pull Request number not found in ref {ctx.ref!r}")

    csv_text = Path(csv_path).read_text(encoding="utf-8")
    record = build_upload_record(csv_path, csv_text, pr_number, sobject=tool.sobject)

    try:
        if await tool.record_exists(pr_number, record.content_hash):
            logger.info("Report already exists in Salesforce. Skipping upload.")
            return UploadOutcome.SKIPPED

        record_id = await tool.create_record(record)
    except RecordStoreError as e:
        logger.error(f"Error uploading CSV to Salesforce: {e}")
        return UploadOutcome.FAILED

    logger.info(f"Upload successful: {record.title} {record_id}".rstrip())
    return UploadOutcome.UPLOADED
