"""Asynchronous subprocess execution with timeouts."""

import asyncio
import logging
import os
import shlex
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"

# Seconds to wait for a killed process to be reaped
REAP_TIMEOUT = 5.0


class ProcessError(RuntimeError):
    """A subprocess failed or timed out."""

    def __init__(self, message: str, result: "ProcessResult") -> None:
        super().__init__(message)
        self.result = result


@dataclass
class ProcessResult:
    """Outcome of a finished (or killed) subprocess."""

    args: list[str]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    timeout: Optional[float] = None

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def diagnostic(self) -> str:
        """Best available explanation of a failure."""
        if self.timed_out:
            return f"Process timed out after {self.timeout:g}s: {self.command_line}"
        if self.stderr.strip():
            return self.stderr.strip()
        if self.stdout.strip():
            return self.stdout.strip()
        return f"Process exited with code {self.returncode}"

    def check(self) -> "ProcessResult":
        """Raise ProcessError unless the process succeeded."""
        if not self.ok:
            raise ProcessError(self.diagnostic(), self)
        return self


async def run_process(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> ProcessResult:
    """Run a command, capturing output, killing it if it exceeds ``timeout``.

    The command runs in its own session so that a timeout or cancellation
    kills everything it started, not only the direct child. A timeout is
    reported through ``ProcessResult.timed_out`` rather than raised.
    Cancellation kills the process group and re-raises. Spawn failures
    (missing executable) raise OSError.

    Args:
        args: Program and arguments.
        cwd: Working directory.
        timeout: Wall-clock limit in seconds, or None for no limit.

    Returns:
        ProcessResult with decoded stdout/stderr.
    """
    argv = [str(a) for a in args]
    logger.debug(f"Running: {shlex.join(argv)}")

    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd) if cwd else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        start_new_session=_POSIX,
    )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Killing process after {timeout}s: {argv[0]}")
        # Output already read is discarded along with the result
        await _terminate(proc)
        return ProcessResult(
            args=argv,
            returncode=proc.returncode,
            timed_out=True,
            timeout=timeout,
        )
    except BaseException:
        logger.warning(f"Killing process on cancellation: {argv[0]}")
        await _terminate(proc)
        raise

    return ProcessResult(
        args=argv,
        returncode=proc.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        timeout=timeout,
    )


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    # The group can outlive its leader, so it is signalled even after exit
    try:
        if _POSIX:
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.returncode is None:
            proc.kill()
    except ProcessLookupError:
        pass


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the process group and reap the child within a bounded wait."""
    _kill_group(proc)
    try:
        await asyncio.wait_for(proc.wait(), timeout=REAP_TIMEOUT)
    except asyncio.TimeoutError:
        # A descendant outside the group still holds the pipes
        logger.warning(f"Process {proc.pid} not reaped within {REAP_TIMEOUT:g}s")
