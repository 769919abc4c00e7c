"""Async external command execution."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..exceptions import ProcessTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit code and decoded output of a finished command."""

    returncode: int
    stdout: str
    stderr: str


async def run_command(
    args: Sequence[str], timeout: Optional[float] = None
) -> CommandResult:
    """Run a command without blocking the event loop.

    Args:
        args: Program and arguments
        timeout: Seconds to wait before killing the command (None waits forever)

    Returns:
        CommandResult with the exit code and captured output

    Raises:
        FileNotFoundError: If the program is not installed
        ProcessTimeoutError: If the command does not finish in time
    """
    logger.debug(f"Running: {' '.join(args)}")
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise ProcessTimeoutError(
            f"Command timed out after {timeout}s: {' '.join(args)}"
        ) from e

    logger.debug(f"Exited with code {process.returncode}")
    return CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
