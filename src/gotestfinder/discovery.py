"""Test file discovery under a directory tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from gotestfinder.parsing import DiscoveryError, parse_test_file

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

    from gotestfinder.models import TestRecord

logger = logging.getLogger(__name__)

GO_EXTENSION = ".go"
DEFAULT_TEST_SUFFIX = "_test.go"


def _raise_walk_error(exc: OSError) -> None:
    path = Path(exc.filename) if exc.filename else Path()
    raise DiscoveryError(f"Failed to read directory {path}: {exc.strerror or exc}", path) from exc


def iter_test_files(
    root: Path,
    *,
    suffix: str = DEFAULT_TEST_SUFFIX,
    exclude_dirs: Collection[str] = (),
) -> Iterator[Path]:
    """Lazily yield Go test files under *root* in sorted walk order.

    Args:
        root: Directory to walk.
        suffix: File name suffix marking a test file.
        exclude_dirs: Directory names to skip wherever they appear.

    Raises:
        DiscoveryError: On the first directory that cannot be listed.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirs)
        for filename in sorted(filenames):
            if filename.endswith(GO_EXTENSION) and filename.endswith(suffix):
                yield Path(dirpath) / filename


def find_tests(
    root: Path,
    *,
    suffix: str = DEFAULT_TEST_SUFFIX,
    exclude_dirs: Collection[str] = (),
) -> list[TestRecord]:
    """Return every test record under *root*, file by file in walk order.

    Any unreadable directory or file aborts the whole discovery.
    """
    records: list[TestRecord] = []
    file_count = 0
    for path in iter_test_files(root, suffix=suffix, exclude_dirs=exclude_dirs):
        records.extend(parse_test_file(path))
        file_count += 1

    logger.debug("Discovered %d test(s) in %d file(s) under %s", len(records), file_count, root)
    return records
