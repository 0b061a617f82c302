"""Tools for the scan CI helpers."""

from .command import CommandResult, run_command
from .git_tool import resolve_commit_range, list_changed_files
from .actions import StepSummary, WorkflowCommandSink, format_annotation
from .salesforce_tool import SalesforceTool
from .github_tool import GitHubTool

__all__ = [
    "CommandResult",
    "run_command",
    "resolve_commit_range",
    "list_changed_files",
    "StepSummary",
    "WorkflowCommandSink",
    "format_annotation",
    "SalesforceTool",
    "GitHubTool",
]
