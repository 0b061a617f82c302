"""Tests for the Salesforce report upload and its deduplication.

Following the testing philosophy:
- Client-perspective behavior verification
- Given-When-Then structure
- Minimal mocking (only external APIs)
"""

import asyncio
import base64
import hashlib
import json
import shutil

import pytest

from scan_ci.config import CIContext
from scan_ci.errors import PRNumberError, RecordStoreError
from scan_ci.models import UploadOutcome
from scan_ci.pipeline.upload import build_upload_record, extract_pr_number, upload_report
from scan_ci.tools import salesforce_tool
from scan_ci.tools.command import CommandResult
from scan_ci.tools.salesforce_tool import SalesforceTool


CSV_TEXT = "engine,fileName,ruleName\npmd,force-app/A.cls,AvoidX\n"


class FakeRecordStore:
    """In-memory stand-in for the sf CLI record store."""

    sobject = "ContentVersion"

    def __init__(self, fail_on=None):
        self.titles = []
        self.queries = []
        self.fail_on = fail_on

    async def record_exists(self, pr_number, content_hash):
        self.queries.append((pr_number, content_hash))
        if self.fail_on == "query":
            raise RecordStoreError("query failed")
        return any(f"PR{pr_number}" in t and content_hash in t for t in self.titles)

    async def create_record(self, record):
        if self.fail_on == "create":
            raise RecordStoreError("create failed")
        self.titles.append(record.title)
        return f"068{len(self.titles):012d}"


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "scan-results-legacy.csv"
    path.write_text(CSV_TEXT)
    return path


PR_CONTEXT = CIContext(ref="refs/pull/42/merge", event_name="pull_request")


class TestExtractPrNumber:
    """Tests for PR number parsing."""

    def test_merge_ref(self):
        assert extract_pr_number("refs/pull/42/merge") == "42"

    def test_branch_ref_has_no_number(self):
        assert extract_pr_number("refs/heads/main") is None

    def test_empty_ref(self):
        assert extract_pr_number("") is None
        assert extract_pr_number(None) is None


class TestBuildUploadRecord:
    """Tests for the upload record."""

    def test_title_hash_and_payload(self):
        """Title should combine report name, PR number and content hash."""
        # When
        record = build_upload_record("out/scan-results-legacy.csv", CSV_TEXT, "42")

        # Then
        digest = hashlib.md5(CSV_TEXT.encode()).hexdigest()
        assert record.content_hash == digest
        assert record.title == f"scan-results-legacy_PR42_{digest}"
        assert base64.b64decode(record.payload).decode() == CSV_TEXT
        assert record.path_on_client == "out/scan-results-legacy.csv"
        assert record.sobject == "ContentVersion"

    def test_same_content_same_hash(self):
        """Identical content should yield identical titles."""
        a = build_upload_record("r.csv", CSV_TEXT, "7")
        b = build_upload_record("r.csv", CSV_TEXT, "7")
        assert a.title == b.title


class TestUploadReport:
    """Tests for the dedup-then-upload flow."""

    def test_second_identical_upload_is_skipped(self, csv_file):
        """Given the same CSV and PR twice, only one record should be created."""
        # Given
        store = FakeRecordStore()

        # When
        first = asyncio.run(upload_report(csv_file, PR_CONTEXT, tool=store))
        second = asyncio.run(upload_report(csv_file, PR_CONTEXT, tool=store))

        # Then
        assert first == UploadOutcome.UPLOADED
        assert second == UploadOutcome.SKIPPED
        assert len(store.titles) == 1

    def test_changed_content_is_uploaded_again(self, csv_file):
        """Given new content for the same PR, should create a second record."""
        # Given
        store = FakeRecordStore()
        asyncio.run(upload_report(csv_file, PR_CONTEXT, tool=store))
        csv_file.write_text(CSV_TEXT + "pmd,force-app/B.cls,AvoidY\n")

        # When
        outcome = asyncio.run(upload_report(csv_file, PR_CONTEXT, tool=store))

        # Then
        assert outcome == UploadOutcome.UPLOADED
        assert len(store.titles) == 2

    def test_missing_pr_number_aborts(self, csv_file):
        """Given a non-PR ref, should raise PRNumberError before touching the store."""
        # Given
        store = FakeRecordStore()
        ctx = CIContext(ref="refs/heads/main")

        # When/Then
        with pytest.raises(PRNumberError):
            asyncio.run(upload_report(csv_file, ctx, tool=store))
        assert store.queries == []

    @pytest.mark.parametrize("fail_on", ["query", "create"])
    def test_store_errors_are_swallowed(self, csv_file, fail_on):
        """Given a failing record store, should report FAILED without raising."""
        store = FakeRecordStore(fail_on=fail_on)
        outcome = asyncio.run(upload_report(csv_file, PR_CONTEXT, tool=store))
        assert outcome == UploadOutcome.FAILED


class TestSalesforceTool:
    """Tests for the sf CLI wrapper (CLI replaced by a fake runner)."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = []
        responses = []

        async def fake_run(cmd, cwd=None):
            calls.append(cmd)
            return responses.pop(0)

        monkeypatch.setattr(salesforce_tool, "run_command", fake_run)
        return calls, responses

    def test_record_exists_builds_soql_query(self, calls):
        """Query should filter on PR number and hash and parse records."""
        # Given
        cmds, responses = calls
        responses.append(CommandResult(
            command=[], returncode=0,
            stdout=json.dumps({"status": 0, "result": {"records": [{"Id": "068x"}]}}),
            stderr="",
        ))

        # When
        exists = asyncio.run(SalesforceTool().record_exists("42", "abc123"))

        # Then
        assert exists is True
        cmd = cmds[0]
        assert cmd[:3] == ["sf", "data", "query"]
        query = cmd[cmd.index("--query") + 1]
        assert "FROM ContentVersion" in query
        assert "'%PR42%'" in query
        assert "'%abc123%'" in query

    def test_record_exists_false_when_no_records(self, calls):
        _, responses = calls
        responses.append(CommandResult(
            command=[], returncode=0,
            stdout=json.dumps({"status": 0, "result": {"records": [], "totalSize": 0}}),
            stderr="",
        ))
        assert asyncio.run(SalesforceTool().record_exists("42", "abc")) is False

    def test_create_record_passes_values(self, calls):
        """Create should send title, client path and base64 payload."""
        # Given
        cmds, responses = calls
        responses.append(CommandResult(
            command=[], returncode=0,
            stdout=json.dumps({"status": 0, "result": {"id": "068000000000001", "success": True}}),
            stderr="",
        ))
        record = build_upload_record("scan-results-legacy.csv", CSV_TEXT, "42")

        # When
        record_id = asyncio.run(SalesforceTool(target_org="ci").create_record(record))

        # Then
        assert record_id == "068000000000001"
        cmd = cmds[0]
        assert cmd[:4] == ["sf", "data", "record", "create"]
        assert cmd[cmd.index("--sobject") + 1] == "ContentVersion"
        values = cmd[cmd.index("--values") + 1]
        assert f"Title='{record.title}'" in values
        assert f"VersionData='{record.payload}'" in values
        assert cmd[-2:] == ["--target-org", "ci"]

    def test_cli_failure_raises_record_store_error(self, calls):
        _, responses = calls
        responses.append(CommandResult(command=[], returncode=1, stdout="", stderr="No default org"))
        with pytest.raises(RecordStoreError, match="No default org"):
            asyncio.run(SalesforceTool().record_exists("42", "abc"))

    def test_unparsable_output_raises_record_store_error(self, calls):
        _, responses = calls
        responses.append(CommandResult(command=[], returncode=0, stdout="Warning: update", stderr=""))
        with pytest.raises(RecordStoreError, match="Unparsable"):
            asyncio.run(SalesforceTool().record_exists("42", "abc"))

    def test_large_report_is_uploaded_from_file(self, calls, tmp_path):
        """Given a payload too big for one argument, should upload the CSV file instead."""
        # Given
        cmds, responses = calls
        responses.append(CommandResult(
            command=[], returncode=0,
            stdout=json.dumps({"status": 0, "result": {"Id": "068000000000002"}}),
            stderr="",
        ))
        csv_path = tmp_path / "scan-results-legacy.csv"
        csv_text = CSV_TEXT + "pmd,force-app/A.cls,AvoidX\n" * 5000
        csv_path.write_text(csv_text)
        record = build_upload_record(csv_path, csv_text, "42")
        assert len(record.payload) > salesforce_tool.MAX_INLINE_PAYLOAD

        # When
        record_id = asyncio.run(SalesforceTool().create_record(record))

        # Then
        assert record_id == "068000000000002"
        cmd = cmds[0]
        assert cmd[:4] == ["sf", "data", "create", "file"]
        assert cmd[cmd.index("--file") + 1] == str(csv_path)
        assert cmd[cmd.index("--title") + 1] == record.title
        assert all(len(arg) < salesforce_tool.MAX_INLINE_PAYLOAD for arg in cmd)

    def test_large_report_for_other_sobject_raises(self, calls):
        record = build_upload_record("r.csv", "x" * 200_000, "42", sobject="Report__c")
        with pytest.raises(RecordStoreError, match="too large"):
            asyncio.run(SalesforceTool(sobject="Report__c").create_record(record))
        assert calls[0] == []

    def test_quote_in_client_path_raises(self, calls):
        """Given a path with a single quote, should refuse to build --values."""
        record = build_upload_record("it's-results.csv", CSV_TEXT, "42")
        with pytest.raises(RecordStoreError, match="single quote"):
            asyncio.run(SalesforceTool().create_record(record))
        assert calls[0] == []


class TestUploadWithRealCommands:
    """The upload step must survive CLI failures of every kind."""

    @pytest.mark.skipif(shutil.which("true") is None, reason="needs the true binary")
    def test_oversized_report_with_failing_cli_is_swallowed(self, tmp_path):
        """Given a large report and a CLI that prints nothing, should report FAILED."""
        # Given
        csv_path = tmp_path / "scan-results-legacy.csv"
        csv_path.write_text(CSV_TEXT + "pmd,force-app/A.cls,AvoidX,some long message\n" * 3000)

        # When
        outcome = asyncio.run(upload_report(
            csv_path, PR_CONTEXT, tool=SalesforceTool(executable="true"),
        ))

        # Then
        assert outcome == UploadOutcome.FAILED
