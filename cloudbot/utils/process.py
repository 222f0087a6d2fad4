"""Subprocess execution with timeout and cancellation passthrough."""

import asyncio
import contextlib
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    termination_grace: float = 10.0,
) -> CommandResult:
    """Run a command and capture its output.

    ``env`` is layered over the current process environment. If the command
    outlives ``timeout`` or the awaiting task is cancelled, the process is
    terminated, then killed after ``termination_grace`` seconds, and the
    TimeoutError or CancelledError is re-raised.

    Args:
        args: Program and its arguments
        cwd: Working directory
        env: Extra environment variables
        timeout: Seconds before the command is stopped; None waits forever
        termination_grace: Seconds between terminate and kill

    Returns:
        Exit code with decoded stdout and stderr

    Raises:
        TimeoutError: The command outlived ``timeout``
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd) if cwd is not None else None,
        env={**os.environ, **env} if env else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except (TimeoutError, asyncio.CancelledError):
        await _stop(process, termination_grace)
        logger.warning("command_interrupted", command=args[0], pid=process.pid)
        raise

    return CommandResult(
        args=tuple(args),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )


async def _stop(process: asyncio.subprocess.Process, grace: float) -> None:
    if process.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        process.terminate()
    try:
        await asyncio.wait_for(asyncio.shield(process.wait()), timeout=grace)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
