"""Single-line recognizers for Go test declarations and ``t.Run`` calls.

These are regex heuristics, not a Go parser: a declaration must fit on one
line, and braces or quotes inside strings and comments are not special.
"""

from __future__ import annotations

import re

# ``func TestXxx(t *testing.T)`` with exactly one ``*testing.T``, ``*testing.B``
# or ``*testing.TB`` parameter.
TEST_DECLARATION_RE = re.compile(r"func\s+(Test\w+)\s*\(\s*\w+\s+\*testing\.(?:TB|T|B)\s*\)")

# ``.Run("name"`` with a plain double-quoted first argument.
SUBTEST_CALL_RE = re.compile(r'\.Run\s*\(\s*"([^"]+)"')

OPEN_DELIMITER = "{"
CLOSE_DELIMITER = "}"


def match_test_declaration(line: str) -> str | None:
    """Return the test function name declared on *line*, or ``None``."""
    match = TEST_DECLARATION_RE.search(line)
    if match is None:
        return None
    return match.group(1)


def find_subtest_names(text: str) -> list[str]:
    """Return every ``.Run("...")`` name in *text*, left to right."""
    return SUBTEST_CALL_RE.findall(text)
