"""Salesforce CLI wrapper for storing scan reports as ContentVersion records."""

import json
from typing import Any, Dict, Optional

from ..errors import RecordStoreError
from ..models import UploadRecord
from ..utils import get_logger
from .command import run_command


# Linux caps one argv string at 128 KiB; stay well below it
MAX_INLINE_PAYLOAD = 96 * 1024


class SalesforceTool:
    """
    Thin wrapper around the ``sf`` CLI.

    Authentication happens earlier in the workflow (``sf org login``);
    this class only queries and creates records in the default org.
    """

    def __init__(
        self,
        sobject: str = "ContentVersion",
        executable: str = "sf",
        target_org: Optional[str] = None,
    ):
        """
        Initialize Salesforce tool.

        Args:
            sobject: Object that stores uploaded reports
            executable: Salesforce CLI binary
            target_org: Org alias or username (defaults to the CLI's default org)
        """
        self.sobject = sobject
        self.executable = executable
        self.target_org = target_org
        self.logger = get_logger()

    def _org_args(self) -> list:
        return ["--target-org", self.target_org] if self.target_org else []

    async def _run_json(self, args: list) -> Dict[str, Any]:
        cmd = [self.executable, *args, *self._org_args()]
        result = await run_command(cmd)
        if not result.ok:
            raise RecordStoreError(
                f"'{' '.join(cmd[:4])}' exited with status {result.returncode}: "
                f"{(result.stderr or result.stdout).strip()}"
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RecordStoreError(f"Unparsable Salesforce CLI output: {e}") from e

    async def record_exists(self, pr_number: str, content_hash: str) -> bool:
        """
        Check whether a report for this PR with identical content is stored.

        Args:
            pr_number: Pull request number
            content_hash: Hex digest of the CSV content

        Returns:
            True if at least one matching record is found
        """
        soql = (
            f"SELECT Id FROM {self.sobject} "
            f"WHERE Title LIKE '%PR{pr_number}%' AND Title LIKE '%{content_hash}%'"
        )
        data = await self._run_json([
            "data",
            "query",
            "--query",
            soql,
            "--result-format",
            "json",
        ])

        # --result-format json prints {"status": 0, "result": {"records": [...]}}
        result = data.get("result", data)
        records = result.get("records") if isinstance(result, dict) else None
        return bool(records)

    async def create_record(self, record: UploadRecord) -> str:
        """
        Create a record holding the report.

        Small reports go inline through ``data record create --values``.
        A payload too large for a single command-line argument is uploaded
        from the CSV file itself with ``data create file``, which only
        targets ContentVersion.

        Args:
            record: Prepared upload record

        Returns:
            Id of the created record (empty if the CLI did not report one)

        Raises:
            RecordStoreError: The CLI failed, or the record cannot be expressed
        """
        if len(record.payload) > MAX_INLINE_PAYLOAD:
            return await self._create_from_file(record)

        # --values has no escape for the quote character
        for name, value in (("Title", record.title), ("PathOnClient", record.path_on_client)):
            if "'" in value:
                raise RecordStoreError(f"{name} {value!r} contains a single quote")

        values = (
            f"Title='{record.title}' "
            f"PathOnClient='{record.path_on_client}' "
            f"VersionData='{record.payload}'"
        )
        data = await self._run_json([
            "data",
            "record",
            "create",
            "--sobject",
            record.sobject,
            "--values",
            values,
            "--json",
        ])

        result = data.get("result") or {}
        return str(result.get("id", "")) if isinstance(result, dict) else ""

    async def _create_from_file(self, record: UploadRecord) -> str:
        if record.sobject != "ContentVersion":
            raise RecordStoreError(
                f"Report of {len(record.payload)} encoded bytes is too large to send "
                f"inline to {record.sobject}"
            )

        self.logger.info(f"Large report; uploading {record.path_on_client} as a file")
        data = await self._run_json([
            "data",
            "create",
            "file",
            "--file",
            record.path_on_client,
            "--title",
            record.title,
            "--json",
        ])

        result = data.get("result") or {}
        if not isinstance(result, dict):
            return ""
        return str(result.get("Id") or result.get("id") or "")
