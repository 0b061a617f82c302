"""Tests for the subprocess helper."""

import asyncio
import shutil
import sys

import pytest

from scan_ci.tools.command import run_command


class TestRunCommand:
    def test_captures_output(self):
        result = asyncio.run(run_command([sys.executable, "-c", "print('hello')"]))
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_missing_executable_is_127(self):
        result = asyncio.run(run_command(["scan-ci-no-such-binary"]))
        assert result.returncode == 127
        assert not result.ok

    @pytest.mark.skipif(
        not sys.platform.startswith("linux") or shutil.which("true") is None,
        reason="argument size limit is Linux specific",
    )
    def test_argument_too_long_is_a_failed_result(self):
        """Given an argument over the kernel limit, should return a failure, not raise."""
        # When
        result = asyncio.run(run_command(["true", "x" * (256 * 1024)]))

        # Then
        assert result.returncode == 126
        assert "too long" in result.stderr.lower()
