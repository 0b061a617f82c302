"""Tests for commit range resolution and changed-file listing.

Following the testing philosophy:
- Client-perspective behavior verification
- Given-When-Then structure
- Minimal mocking (only external APIs)
"""

import asyncio

import pytest

from scan_ci.config import CIContext, NonPRPolicy
from scan_ci.errors import CommitRangeError, GitCommandError
from scan_ci.models import CommitRange
from scan_ci.tools import git_tool
from scan_ci.tools.command import CommandResult
from scan_ci.tools.git_tool import list_changed_files, resolve_commit_range


@pytest.fixture
def git(monkeypatch):
    """Replace the command runner; returns (recorded commands, queued results)."""
    commands = []
    results = []

    async def fake_run(cmd, cwd=None):
        commands.append(cmd)
        return results.pop(0)

    monkeypatch.setattr(git_tool, "run_command", fake_run)
    return commands, results


def ok(stdout):
    return CommandResult(command=[], returncode=0, stdout=stdout, stderr="")


class TestResolveCommitRange:
    """Tests for the commit range resolver."""

    def test_pull_request_refs_use_remote_prefix(self, git):
        """Given base and head refs, should compare remote-tracking branches."""
        # Given
        commands, _ = git
        ctx = CIContext(base_ref="main", head_ref="feature/x", event_name="pull_request")

        # When
        commit_range = asyncio.run(resolve_commit_range(ctx))

        # Then
        assert commit_range == CommitRange("origin/main", "origin/feature/x")
        assert str(commit_range) == "origin/main...origin/feature/x"
        assert commands == []

    def test_pull_request_refs_without_remote(self, git):
        ctx = CIContext(base_ref="main", head_ref="feature")
        assert str(asyncio.run(resolve_commit_range(ctx, remote=""))) == "main...feature"

    @pytest.mark.parametrize("policy", list(NonPRPolicy))
    def test_pull_request_event_without_refs_aborts(self, git, policy):
        """Given a pull request event missing base/head, should not fall back to HEAD^."""
        # Given
        commands, _ = git
        ctx = CIContext(event_name="pull_request_target", sha="abc")

        # When / Then
        with pytest.raises(CommitRangeError, match="pull request"):
            asyncio.run(resolve_commit_range(ctx, policy=policy))
        assert commands == []

    def test_skip_policy_returns_none(self, git):
        """Given a push and SKIP policy, should report not applicable."""
        commands, _ = git
        ctx = CIContext(event_name="push", sha="abc")
        assert asyncio.run(resolve_commit_range(ctx, policy=NonPRPolicy.SKIP)) is None
        assert commands == []

    def test_fallback_with_sha_compares_parent(self, git):
        """Given a push with a SHA, should diff HEAD^ against it."""
        # Given
        commands, results = git
        results.append(ok("1111111\n"))
        ctx = CIContext(event_name="push", sha="2222222")

        # When
        commit_range = asyncio.run(resolve_commit_range(ctx, policy=NonPRPolicy.FALLBACK))

        # Then
        assert commit_range == CommitRange("1111111", "2222222")
        assert commands == [["git", "rev-parse", "HEAD^"]]

    def test_fallback_without_sha_uses_last_two_commits(self, git):
        _, results = git
        results.append(ok("1111111\n"))
        commit_range = asyncio.run(resolve_commit_range(CIContext()))
        assert commit_range == CommitRange("HEAD~1", "HEAD")

    def test_single_commit_repository_aborts(self, git):
        """Given a repository with one commit, should raise CommitRangeError."""
        _, results = git
        results.append(CommandResult(
            command=[], returncode=128, stdout="",
            stderr="fatal: ambiguous argument 'HEAD^': unknown revision",
        ))
        with pytest.raises(CommitRangeError, match="at least two commits"):
            asyncio.run(resolve_commit_range(CIContext(sha="abc")))


class TestListChangedFiles:
    """Tests for the changed-file lister."""

    def test_splits_lines_and_passes_filter(self, git):
        # Given
        commands, results = git
        results.append(ok("force-app/a.cls\nforce-app/b.cls\n"))

        # When
        files = asyncio.run(list_changed_files(CommitRange("origin/main", "origin/f"), "MCR"))

        # Then
        assert files == ["force-app/a.cls", "force-app/b.cls"]
        assert commands[0] == [
            "git", "diff", "--name-only", "--diff-filter=MCR", "origin/main...origin/f",
        ]

    def test_no_changes(self, git):
        _, results = git
        results.append(ok(""))
        assert asyncio.run(list_changed_files(CommitRange("a", "b"), "A")) == []

    def test_git_failure_raises(self, git):
        """Given a failing git diff, should propagate GitCommandError."""
        _, results = git
        results.append(CommandResult(command=[], returncode=128, stdout="", stderr="bad revision"))

        with pytest.raises(GitCommandError) as exc_info:
            asyncio.run(list_changed_files(CommitRange("a", "b"), "A"))

        assert exc_info.value.returncode == 128
        assert "bad revision" in str(exc_info.value)
