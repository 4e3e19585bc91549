"""Per-file test extraction built on the line classifier and brace tracker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gotestfinder.models import TestRecord
from gotestfinder.parsing.blocks import BlockDepthTracker, BodyExtent, find_body_extent
from gotestfinder.parsing.lexical import (
    CLOSE_DELIMITER,
    OPEN_DELIMITER,
    find_subtest_names,
    match_test_declaration,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


class DiscoveryError(Exception):
    """Raised when a directory or test file cannot be read."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


def _body_segments(lines: Sequence[str], extent: BodyExtent) -> Iterator[str]:
    """Yield the text of each line in *extent* that lies inside the body.

    Text before the opening brace and after the closing brace is dropped, so
    a ``t.Run`` that shares a line with either brace but sits outside the
    body is not picked up.
    """
    tracker = BlockDepthTracker()
    for index in range(extent.start, extent.end + 1):
        line = lines[index]
        was_entered = tracker.entered
        tracker.feed(line)
        if not tracker.entered:
            continue

        segment = line
        if not was_entered:
            segment = segment[segment.index(OPEN_DELIMITER) + 1 :]
        if extent.closed and index == extent.end:
            cut = segment.rfind(CLOSE_DELIMITER)
            segment = segment[:cut] if cut >= 0 else ""
        yield segment


def extract_tests(text: str, file: Path) -> list[TestRecord]:
    """Return the test declarations in *text* in source order.

    Each declaration line starts its own body scan, so a declaration nested
    inside another body (never valid Go) simply yields a second record.
    """
    # Split on "\n" only so line numbers match what the Go toolchain reports.
    lines = text.split("\n")
    records: list[TestRecord] = []

    for index, line in enumerate(lines):
        name = match_test_declaration(line)
        if name is None:
            continue

        extent = find_body_extent(lines, index)
        if not extent.closed:
            logger.debug("%s:%d: body of %s never closes", file, index + 1, name)

        subtests: list[str] = []
        for segment in _body_segments(lines, extent):
            subtests.extend(find_subtest_names(segment))

        records.append(TestRecord(name=name, file=file, line=index + 1, subtests=tuple(subtests)))

    return records


def parse_test_file(path: Path) -> list[TestRecord]:
    """Read *path* as UTF-8 and extract its tests.

    Raises:
        DiscoveryError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DiscoveryError(f"Failed to read {path}: {exc}", path) from exc

    records = extract_tests(text, path)
    logger.debug("Parsed %s: %d test(s)", path, len(records))
    return records
