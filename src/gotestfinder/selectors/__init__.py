"""Interactive test selection backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gotestfinder.selectors.base import TestSelector
from gotestfinder.selectors.fzf import FzfSelector
from gotestfinder.selectors.textual_app import TestPickerApp, TextualSelector

if TYPE_CHECKING:
    from gotestfinder.config import SelectorConfig

__all__ = [
    "FzfSelector",
    "TestPickerApp",
    "TestSelector",
    "TextualSelector",
    "get_selector",
]


def get_selector(config: SelectorConfig) -> TestSelector:
    """Return the selection backend named by ``config.backend``.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if config.backend == "textual":
        return TextualSelector(prompt=config.prompt, header=config.header)
    if config.backend == "fzf":
        return FzfSelector(command=config.fzf_command, prompt=config.prompt)
    raise ValueError(f"Unknown selector backend: {config.backend!r}")
