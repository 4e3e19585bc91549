"""Selection through the external ``fzf`` binary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gotestfinder.selectors.base import TestSelector
from gotestfinder.utils.subprocess_runner import SubprocessError, run_subprocess

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# fzf exit codes that mean "nothing chosen" rather than failure.
_FZF_NO_MATCH = 1
_FZF_INTERRUPTED = 130


class FzfSelector(TestSelector):
    """Pipe candidates into ``fzf --multi`` and read back the chosen lines."""

    def __init__(self, command: str = "fzf", prompt: str = "Select tests: ") -> None:
        self.command = command
        self.prompt = prompt

    @property
    def name(self) -> str:
        return "fzf"

    def build_command(self) -> list[str]:
        return [self.command, "--multi", f"--prompt={self.prompt}"]

    async def select(self, candidates: Sequence[str]) -> list[str]:
        if not candidates:
            return []

        try:
            result = await run_subprocess(
                self.build_command(),
                input_text="".join(f"{candidate}\n" for candidate in candidates),
            )
        except SubprocessError as exc:
            logger.warning("Error running fzf: %s", exc)
            return []

        if result.returncode in (_FZF_NO_MATCH, _FZF_INTERRUPTED):
            logger.debug("fzf returned %d, nothing selected", result.returncode)
            return []
        if not result.success:
            logger.warning("fzf exited with code %d", result.returncode)
            return []

        return [line for line in result.stdout.splitlines() if line]
