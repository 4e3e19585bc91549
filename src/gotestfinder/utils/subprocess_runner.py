"""Subprocess execution for the interactive selector and ``go test``.

Two modes are provided: :func:`run_subprocess` feeds stdin and captures
stdout (stderr stays attached to the terminal so interactive tools can draw
on it), and :func:`run_streaming` lets the child inherit all standard
streams and only reports its exit code.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Exit status reported when the child's own code is unavailable.
UNKNOWN_EXIT_CODE = 1


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    """Exit code of the process."""

    stdout: str
    """Standard output captured from the process."""

    stderr: str
    """Error text, only set when the process could not be run."""

    success: bool
    """True if returncode is 0."""

    timed_out: bool = False
    """True if the process was terminated due to timeout."""

    duration_ms: float = 0.0
    """Actual duration of execution in milliseconds."""


class SubprocessError(Exception):
    """Exception raised when subprocess execution fails."""

    def __init__(self, message: str, result: SubprocessResult) -> None:
        """Initialize with error message and result.

        Args:
            message: Error description.
            result: The SubprocessResult from the failed execution.
        """
        super().__init__(message)
        self.result = result


def _check_arguments(command: Sequence[str], cwd: Path | None) -> Path:
    if not command:
        raise ValueError("Command cannot be empty")

    work_dir = cwd.resolve() if cwd else Path.cwd()
    if not work_dir.exists():
        raise ValueError(f"Working directory does not exist: {work_dir}")
    return work_dir


def _launch_error(command: Sequence[str], exc: OSError) -> SubprocessError:
    result = SubprocessResult(returncode=-1, stdout="", stderr=str(exc), success=False)
    if isinstance(exc, FileNotFoundError):
        logger.error("Command not found: %s", command[0])
        return SubprocessError(f"Command not found: {command[0]}", result=result)
    logger.error("Failed to start %s: %s", command[0], exc)
    return SubprocessError(f"Failed to start {command[0]}: {exc}", result=result)


async def run_subprocess(
    command: Sequence[str],
    *,
    input_text: str | None = None,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> SubprocessResult:
    """Run *command*, feed it *input_text* and capture its stdout.

    Args:
        command: Command and arguments as a sequence (e.g. ``['fzf', '--multi']``).
        input_text: Text written to the child's stdin, which is then closed.
        cwd: Working directory for the subprocess. Defaults to current directory.
        timeout: Maximum seconds to wait. ``None`` waits indefinitely.

    Returns:
        SubprocessResult with exit code, output, and metadata.

    Raises:
        SubprocessError: If the command cannot be started.
        ValueError: If command is empty, timeout is invalid or cwd is missing.
    """
    if timeout is not None and timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")
    work_dir = _check_arguments(command, cwd)

    logger.debug(
        "Running subprocess: %s (cwd=%s, timeout=%s)",
        " ".join(str(c) for c in command),
        work_dir,
        timeout,
    )

    start_time = time.perf_counter()
    timed_out = False

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            cwd=work_dir,
        )
    except OSError as exc:
        raise _launch_error(command, exc) from exc

    stdin_bytes = input_text.encode("utf-8") if input_text is not None else b""
    try:
        stdout_bytes, _ = await asyncio.wait_for(
            process.communicate(input=stdin_bytes), timeout=timeout
        )
    except TimeoutError:
        logger.warning("Subprocess timed out after %s seconds", timeout)
        timed_out = True
        try:
            process.kill()
            await process.wait()
        except ProcessLookupError:
            pass  # Process already terminated
        stdout_bytes = b""

    duration_ms = (time.perf_counter() - start_time) * 1000
    returncode = process.returncode if process.returncode is not None else -1
    if timed_out:
        returncode = -1

    result = SubprocessResult(
        returncode=returncode,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr="Process timed out and was killed" if timed_out else "",
        success=(returncode == 0 and not timed_out),
        timed_out=timed_out,
        duration_ms=duration_ms,
    )

    logger.debug(
        "Subprocess completed: returncode=%d, duration=%.2fms, success=%s",
        returncode,
        duration_ms,
        result.success,
    )
    return result


async def run_streaming(command: Sequence[str], *, cwd: Path | None = None) -> int:
    """Run *command* with inherited stdio and return its exit code.

    Output goes straight to the user's terminal. A child killed by a signal
    has no exit code of its own and is reported as ``1``.

    Raises:
        SubprocessError: If the command cannot be started.
        ValueError: If command is empty or cwd is missing.
    """
    work_dir = _check_arguments(command, cwd)
    logger.debug("Running: %s (cwd=%s)", " ".join(str(c) for c in command), work_dir)

    try:
        process = await asyncio.create_subprocess_exec(*command, cwd=work_dir)
    except OSError as exc:
        raise _launch_error(command, exc) from exc

    returncode = await process.wait()
    logger.debug("%s exited with %s", command[0], returncode)
    if returncode is None or returncode < 0:
        return UNKNOWN_EXIT_CODE
    return returncode
