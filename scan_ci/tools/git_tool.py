"""Git helpers: commit range resolution and changed-file listing."""

from pathlib import Path
from typing import List, Optional, Union

from ..config import CIContext, NonPRPolicy
from ..errors import CommitRangeError, GitCommandError
from ..models import CommitRange
from ..utils import get_logger
from .command import run_command


async def resolve_commit_range(
    ctx: CIContext,
    policy: NonPRPolicy = NonPRPolicy.FALLBACK,
    remote: str = "origin",
    cwd: Optional[Union[str, Path]] = None,
) -> Optional[CommitRange]:
    """
    Determine the commit range to diff.

    Pull requests compare base and head, qualified with ``remote`` so the
    remote-tracking branches are used. Outside a pull request the policy
    decides: SKIP returns None, FALLBACK compares HEAD^ with the current
    commit.

    Args:
        ctx: CI environment snapshot
        policy: Behaviour when no base/head pair is available
        remote: Remote name prefix ("" compares local refs)
        cwd: Repository directory

    Returns:
        The range, or None when the run is not applicable

    Raises:
        CommitRangeError: A pull request event lacks its refs, or the
            repository has fewer than two commits
    """
    logger = get_logger()

    if ctx.base_ref and ctx.head_ref:
        prefix = f"{remote}/" if remote else ""
        commit_range = CommitRange(f"{prefix}{ctx.base_ref}", f"{prefix}{ctx.head_ref}")
        logger.info(f"Pull request range: {commit_range}")
        return commit_range

    if ctx.is_pull_request:
        raise CommitRangeError(
            f"Event '{ctx.event_name}' is a pull request but GITHUB_BASE_REF/GITHUB_HEAD_REF are not set"
        )

    if policy == NonPRPolicy.SKIP:
        logger.info(f"No pull request refs (event: {ctx.event_name or 'unknown'}); nothing to diff")
        return None

    result = await run_command(["git", "rev-parse", "HEAD^"], cwd=cwd)
    previous = result.stdout.strip()
    if not result.ok or not previous:
        raise CommitRangeError(
            f"Cannot resolve HEAD^ (does the repository have at least two commits?): "
            f"{result.stderr.strip()}"
        )

    if ctx.sha:
        commit_range = CommitRange(previous, ctx.sha)
    else:
        logger.warning("Falling back to the last two commits for diff range.")
        commit_range = CommitRange("HEAD~1", "HEAD")

    logger.info(f"Push range: {commit_range}")
    return commit_range


async def list_changed_files(
    commit_range: CommitRange,
    diff_filter: str,
    cwd: Optional[Union[str, Path]] = None,
) -> List[str]:
    """
    List files changed in a range, as reported by git.

    Args:
        commit_range: Range to diff
        diff_filter: git --diff-filter letters, e.g. "MCR" or "A"
        cwd: Repository directory

    Returns:
        Changed paths in git's order

    Raises:
        GitCommandError: git diff exited non-zero
    """
    cmd = [
        "git",
        "diff",
        "--name-only",
        f"--diff-filter={diff_filter}",
        str(commit_range),
    ]
    result = await run_command(cmd, cwd=cwd)
    if not result.ok:
        raise GitCommandError(cmd, result.returncode, result.stderr)

    # git terminates its output with a newline; that last empty line is not a path
    return [line for line in result.stdout.split("\n") if line]
