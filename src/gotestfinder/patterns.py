"""Turn test records into selectable identifiers and ``-run`` patterns."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from gotestfinder.models import TestRecord

ALTERNATION = "|"


def flatten(
    records: Iterable[TestRecord],
    *,
    show_subtests: bool = True,
    show_parent: bool = True,
) -> list[str]:
    """Return the identifiers for *records* in discovery order.

    A record without sub-tests always contributes its bare name. For one
    with sub-tests the bare name depends on *show_parent* and the
    ``Name/Sub`` entries on *show_subtests*.
    """
    identifiers: list[str] = []
    for record in records:
        if not record.has_subtests:
            identifiers.append(record.name)
            continue

        if show_parent:
            identifiers.append(record.name)
        if show_subtests:
            identifiers.extend(record.subtest_identifier(sub) for sub in record.subtests)
    return identifiers


def combine(chosen: Sequence[str]) -> str:
    """Join *chosen* identifiers into one ``go test -run`` pattern.

    Empty input gives ``""`` (run everything). Names are not regex-escaped.
    """
    if not chosen:
        return ""
    if len(chosen) == 1:
        return chosen[0]
    return ALTERNATION.join(chosen)


def anchor(identifier: str) -> str:
    """Return *identifier* wrapped as ``^identifier$`` for listing output."""
    return f"^{identifier}$"
