"""Abstract base class for interactive test selectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class TestSelector(ABC):
    """Let the user pick any number of identifiers from a candidate list."""

    __test__ = False  # keep pytest from collecting this class

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (``'textual'``, ``'fzf'``)."""

    @abstractmethod
    async def select(self, candidates: Sequence[str]) -> list[str]:
        """Return the chosen candidates.

        An empty list means the user cancelled or picked nothing. A selection
        round that fails also returns an empty list; it is never retried.
        """
