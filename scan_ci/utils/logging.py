"""Logging utilities.

Everything logs through the ``scan_ci`` logger on stdout, the same stream
the workflow-command annotation sink writes to, so log lines and
``::error`` commands stay in order in the job log.
"""

import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional, TextIO


LOGGER_NAME = "scan_ci"

LOCAL_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
# The runner stamps every line itself
ACTIONS_FORMAT = "%(levelname)s - %(message)s"


def running_in_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True inside a GitHub Actions job."""
    env = os.environ if environ is None else environ
    return env.get("GITHUB_ACTIONS") == "true"


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach a stdout handler to the package logger.

    Calling it again replaces the handler instead of stacking a second one,
    so each CLI subcommand can set its own level.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string (default depends on the runner)
        stream: Output stream (default: sys.stdout at call time)

    Returns:
        Configured logger
    """
    if format_str is None:
        format_str = ACTIONS_FORMAT if running_in_actions() else LOCAL_FORMAT

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(format_str))

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


@contextmanager
def log_group(title: str, stream: Optional[TextIO] = None) -> Iterator[logging.Logger]:
    """
    Fold the enclosed log lines under ``title``.

    In Actions this emits ``::group::`` / ``::endgroup::`` so the job log
    shows a collapsible section; elsewhere the title is logged as a heading.
    """
    logger = get_logger()
    if not running_in_actions():
        logger.info(f"**{title}**")
        yield logger
        return

    out = stream or sys.stdout
    out.write(f"::group::{title}\n")
    out.flush()
    try:
        yield logger
    finally:
        out.write("::endgroup::\n")
        out.flush()
