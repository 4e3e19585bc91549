"""``go test`` command construction and execution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gotestfinder.config import RunnerConfig
from gotestfinder.utils.subprocess_runner import run_streaming

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


def build_go_test_command(
    run_pattern: str,
    *,
    tags: str | None = None,
    verbose: bool = False,
    runner: RunnerConfig | None = None,
) -> list[str]:
    """Return the argv for ``go test`` restricted to *run_pattern*.

    Flags that have no value are left out entirely: no ``-run`` for an
    empty pattern, no ``-tags`` without tags, no ``-v`` unless *verbose*.
    """
    runner = runner or RunnerConfig()
    cmd = [runner.command, "test", f"-count={runner.count}"]

    if verbose:
        cmd.append("-v")
    if tags:
        cmd.append(f"-tags={tags}")
    if run_pattern:
        cmd.extend(["-run", run_pattern])

    cmd.extend(runner.packages)
    logger.debug("Built go test command: %s", cmd)
    return cmd


def format_command(command: Sequence[str]) -> str:
    """Return *command* joined with spaces, as echoed before running it."""
    return " ".join(command)


async def execute_go_test(command: Sequence[str], *, cwd: Path | None = None) -> int:
    """Run *command* with output streamed to the terminal; return its exit code."""
    return await run_streaming(command, cwd=cwd)
