"""Subprocess helper shared by the git and Salesforce CLI wrappers."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..utils import get_logger


@dataclass(frozen=True)
class CommandResult:
    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    cmd: Sequence[str],
    cwd: Optional[Union[str, Path]] = None,
) -> CommandResult:
    """
    Run a command without a shell and capture its output.

    A missing executable is reported as exit status 127 and any other
    failure to start (e.g. an oversized argument list) as 126, the way a
    shell would, so callers only ever branch on the return code.
    """
    logger = get_logger()
    logger.debug(f"Running: {' '.join(cmd)[:500]}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as e:
        return CommandResult(command=list(cmd), returncode=127, stdout="", stderr=str(e))
    except OSError as e:
        return CommandResult(command=list(cmd), returncode=126, stdout="", stderr=str(e))

    stdout, stderr = await process.communicate()
    return CommandResult(
        command=list(cmd),
        returncode=process.returncode,
        stdout=stdout.decode(),
        stderr=stderr.decode(),
    )
