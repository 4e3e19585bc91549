"""Brace-depth tracking used to bound a function body without a parser.

The tracker counts ``{`` and ``}`` per line. Depth never goes below zero, so
stray closing braces (for example inside a string literal) cannot push the
count negative and end a later body early.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gotestfinder.parsing.lexical import CLOSE_DELIMITER, OPEN_DELIMITER

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True)
class BodyExtent:
    """Line range (0-based, inclusive) covered by a declaration."""

    start: int
    end: int
    closed: bool
    """False when end of file was reached before the body closed."""


class BlockDepthTracker:
    """Line-by-line brace counter with saturating depth."""

    def __init__(self) -> None:
        self.depth = 0
        self.entered = False

    @property
    def closed(self) -> bool:
        """True once the body has been opened and every brace closed again."""
        return self.entered and self.depth == 0

    def feed(self, line: str) -> bool:
        """Account for the delimiters on *line* and return :attr:`closed`."""
        opened = line.count(OPEN_DELIMITER)
        if opened:
            self.depth += opened
            self.entered = True
        self.depth = max(0, self.depth - line.count(CLOSE_DELIMITER))
        return self.closed


def find_body_extent(lines: Sequence[str], start: int) -> BodyExtent:
    """Scan from *start* until the body that opens there closes again.

    The opening brace does not have to be on the *start* line. If the body
    never closes, the extent runs to the last line and ``closed`` is False.
    """
    if not 0 <= start < len(lines):
        raise IndexError(f"start line {start} outside 0..{len(lines) - 1}")

    tracker = BlockDepthTracker()
    for index in range(start, len(lines)):
        if tracker.feed(lines[index]):
            return BodyExtent(start=start, end=index, closed=True)
    return BodyExtent(start=start, end=len(lines) - 1, closed=False)
