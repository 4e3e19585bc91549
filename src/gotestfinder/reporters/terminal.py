"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

console = Console()
error_console = Console(stderr=True)


class CLIReporter:
    """Rich terminal output for discovery and run messages."""

    def __init__(self, target: Console | None = None, errors: Console | None = None) -> None:
        """Initialize the CLI reporter.

        Errors go to *errors* (stderr by default) so they never mix with
        listing output on stdout.
        """
        self.console = target or console
        self.error_console = errors or error_console

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.error_console.print(Text.assemble(("✗", "red"), " ", message))

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(Text(message))

    def print_errors(self, title: str, errors: Sequence[str]) -> None:
        """Print a heading followed by one bullet per error."""
        self.print_error(title)
        for error in errors:
            self.error_console.print(Text(f"  • {error}", style="red"))

    def print_command(self, command: str) -> None:
        """Echo the command about to run, kept on a single line."""
        self.console.print(
            Text.assemble(("Running: ", "bold cyan"), command),
            soft_wrap=True,
        )


reporter = CLIReporter()
