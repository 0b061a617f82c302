"""GitHub Actions runner integration: step summary and workflow commands."""

import sys
from pathlib import Path
from typing import Dict, Optional, TextIO

from ..models import Annotation
from ..utils import get_logger


def escape_data(value: object) -> str:
    """Escape a workflow command message."""
    return (
        str(value)
        .replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
    )


def escape_property(value: object) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_annotation(annotation: Annotation) -> str:
    """
    Render an annotation as a workflow command.

    e.g. ``::error title=AvoidX,file=force-app/Foo.cls,line=1,col=1::bad``
    """
    properties: Dict[str, object] = {
        "title": annotation.title,
        "file": annotation.file,
        "line": annotation.start_line,
        "endLine": annotation.end_line,
        "col": annotation.start_column,
        "endColumn": annotation.end_column,
    }
    rendered = ",".join(
        f"{key}={escape_property(value)}"
        for key, value in properties.items()
        if value is not None and value != ""
    )
    separator = " " if rendered else ""
    return f"::{annotation.level}{separator}{rendered}::{escape_data(annotation.message)}"


class WorkflowCommandSink:
    """Emits annotations as workflow commands on stdout."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    async def emit(self, annotation: Annotation) -> None:
        stream = self.stream or sys.stdout
        stream.write(format_annotation(annotation) + "\n")
        stream.flush()


class StepSummary:
    """
    Appends Markdown to the job's step summary.

    Outside Actions (no GITHUB_STEP_SUMMARY) the Markdown is logged instead.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self.logger = get_logger()

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def write(self, markdown: str) -> None:
        if not markdown.endswith("\n"):
            markdown += "\n"

        if self.path is None:
            self.logger.info("GITHUB_STEP_SUMMARY not set; summary follows\n" + markdown)
            return

        with open(self.path, "a", encoding="utf-8") as f:
            f.write(markdown)
        self.logger.info(f"GitHub table added to step summary ({self.path})")
