"""GitHub API wrapper for publishing scan results as a check run."""

import os
from typing import Dict, List, Optional

from github import Github, GithubException
from github.Repository import Repository

from ..models import Annotation
from ..utils import get_logger


# GitHub accepts at most 50 annotations per check run request
ANNOTATION_BATCH_SIZE = 50
MAX_SUMMARY_LENGTH = 65535

ANNOTATION_LEVELS = {
    "error": "failure",
    "warning": "warning",
    "notice": "notice",
}


def to_check_annotation(annotation: Annotation) -> Dict[str, object]:
    """Convert an annotation to the check run API shape."""
    start_line = annotation.start_line or 1
    end_line = annotation.end_line or start_line
    payload: Dict[str, object] = {
        "path": annotation.file,
        "start_line": start_line,
        "end_line": end_line,
        "annotation_level": ANNOTATION_LEVELS.get(annotation.level, "failure"),
        "message": annotation.message,
        "title": annotation.title,
    }
    # Columns are only accepted for single-line annotations
    if start_line == end_line and annotation.start_column:
        payload["start_column"] = annotation.start_column
        payload["end_column"] = annotation.end_column or annotation.start_column
    return payload


class GitHubTool:
    """
    GitHub API wrapper for scan result publishing.

    Handles:
    - Creating a completed check run on the scanned commit
    - Attaching the summary Markdown
    - Uploading annotations in API-sized batches
    """

    def __init__(self, repo: str, head_sha: str, token: Optional[str] = None):
        """
        Initialize GitHub tool.

        Args:
            repo: Repository in format "owner/repo"
            head_sha: Commit the check run is attached to
            token: GitHub token (defaults to GITHUB_TOKEN env var)
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        if not self.token:
            raise ValueError("GitHub token required. Set GITHUB_TOKEN env var or pass token parameter.")

        self.gh = Github(self.token)
        self.repo_name = repo
        self.head_sha = head_sha
        self._repo: Optional[Repository] = None
        self.logger = get_logger()

    @property
    def repo(self) -> Repository:
        """Get the repository object (cached)."""
        if self._repo is None:
            self._repo = self.gh.get_repo(self.repo_name)
        return self._repo

    def publish_check_run(
        self,
        name: str,
        summary: str,
        annotations: List[Annotation],
    ) -> bool:
        """
        Publish scan results as a completed check run.

        Args:
            name: Check run name, also used as output title
            summary: Markdown summary
            annotations: Annotations to attach

        Returns:
            True if the check run and all annotation batches were posted
        """
        if len(summary) > MAX_SUMMARY_LENGTH:
            summary = summary[:MAX_SUMMARY_LENGTH - 20] + "\n\n*(truncated)*"

        payloads = [to_check_annotation(a) for a in annotations]
        batches = [
            payloads[i:i + ANNOTATION_BATCH_SIZE]
            for i in range(0, len(payloads), ANNOTATION_BATCH_SIZE)
        ] or [[]]

        try:
            check_run = self.repo.create_check_run(
                name=name,
                head_sha=self.head_sha,
                status="completed",
                conclusion="failure" if payloads else "success",
                output={"title": name, "summary": summary, "annotations": batches[0]},
            )
            # Each edit appends its annotations to the run
            for batch in batches[1:]:
                check_run.edit(
                    output={"title": name, "summary": summary, "annotations": batch}
                )
            self.logger.info(
                f"Posted check run '{name}' with {len(payloads)} annotations "
                f"in {len(batches)} request(s)"
            )
            return True
        except GithubException as e:
            self.logger.error(f"Failed to post check run: {e}")
            return False
