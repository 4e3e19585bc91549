"""Built-in fuzzy multi-select picker using Textual."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.fuzzy import Matcher
from textual.widgets import Footer, Input, SelectionList, Static

from gotestfinder.selectors.base import TestSelector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from textual.binding import BindingType


class TestPickerApp(App[list[str]]):
    """Filter-as-you-type list of test identifiers with multi-select.

    Typing narrows the list with a fuzzy match. TAB toggles the highlighted
    entry and moves down, ENTER confirms (the highlighted entry alone when
    nothing was toggled), ESC cancels with an empty result.
    """

    __test__ = False  # keep pytest from collecting this class

    CSS = """
    #picker-header {
        color: $accent;
        padding: 0 1;
    }
    #picker-query {
        dock: top;
    }
    #picker-candidates {
        height: 1fr;
        border: none;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("tab", "toggle", "Toggle", priority=True),
        Binding("enter", "confirm", "Run", priority=True),
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+c", "cancel", "Cancel", show=False, priority=True),
        Binding("down", "cursor_down", show=False, priority=True),
        Binding("up", "cursor_up", show=False, priority=True),
    ]

    def __init__(self, candidates: Sequence[str], *, prompt: str = "", header: str = "") -> None:
        super().__init__()
        # A value can only be selected once, so repeated identifiers collapse.
        self.candidates = list(dict.fromkeys(candidates))
        self.picker_prompt = prompt
        self.picker_header = header
        self.chosen: list[str] = []

    def compose(self) -> ComposeResult:
        yield Input(placeholder=self.picker_prompt, id="picker-query")
        if self.picker_header:
            yield Static(self.picker_header, id="picker-header", markup=False)
        yield SelectionList[str](*self._selections(self.candidates), id="picker-candidates")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#picker-query", Input).focus()
        if self.candidates:
            self._candidate_list.highlighted = 0

    @property
    def _candidate_list(self) -> SelectionList[str]:
        return self.query_one("#picker-candidates", SelectionList)

    def _selections(self, values: Sequence[str]) -> list[tuple[Text, str, bool]]:
        return [(Text(value), value, value in self.chosen) for value in values]

    def visible_values(self) -> list[str]:
        """Return the values currently listed, top to bottom."""
        selection_list = self._candidate_list
        return [
            selection_list.get_option_at_index(index).value
            for index in range(selection_list.option_count)
        ]

    def filter_candidates(self, query: str) -> list[str]:
        """Return candidates matching *query*, best match first."""
        query = query.strip()
        if not query:
            return list(self.candidates)

        matcher = Matcher(query)
        scored = [
            (matcher.match(value), index, value) for index, value in enumerate(self.candidates)
        ]
        ranked = sorted(scored, key=lambda item: (-item[0], item[1]))
        return [value for score, _, value in ranked if score > 0]

    def _sync_chosen(self) -> None:
        """Bring :attr:`chosen` in line with the visible list's check marks.

        Hidden entries keep their state, so a selection survives changing
        the filter. New check marks are appended in the order they appear.
        """
        selected = set(self._candidate_list.selected)
        for value in self.visible_values():
            if value in selected and value not in self.chosen:
                self.chosen.append(value)
            elif value not in selected and value in self.chosen:
                self.chosen.remove(value)

    @on(Input.Changed, "#picker-query")
    def _apply_filter(self, event: Input.Changed) -> None:
        visible = self.filter_candidates(event.value)
        selection_list = self._candidate_list
        selection_list.clear_options()
        selection_list.add_options(self._selections(visible))
        if visible:
            selection_list.highlighted = 0

    @on(SelectionList.SelectedChanged)
    def _selection_changed(self) -> None:
        self._sync_chosen()

    def action_toggle(self) -> None:
        selection_list = self._candidate_list
        if selection_list.highlighted is None:
            return
        value = selection_list.get_option_at_index(selection_list.highlighted).value
        selection_list.toggle(value)
        self._sync_chosen()
        selection_list.action_cursor_down()

    def action_cursor_down(self) -> None:
        self._candidate_list.action_cursor_down()

    def action_cursor_up(self) -> None:
        self._candidate_list.action_cursor_up()

    def action_confirm(self) -> None:
        self._sync_chosen()
        if self.chosen:
            self.exit(list(self.chosen))
            return

        selection_list = self._candidate_list
        if selection_list.highlighted is None:
            self.exit([])
            return
        self.exit([selection_list.get_option_at_index(selection_list.highlighted).value])

    def action_cancel(self) -> None:
        self.exit([])


class TextualSelector(TestSelector):
    """Run :class:`TestPickerApp` in the current terminal."""

    def __init__(self, prompt: str = "Select tests: ", header: str = "") -> None:
        self.prompt = prompt
        self.header = header

    @property
    def name(self) -> str:
        return "textual"

    def create_app(self, candidates: Sequence[str]) -> TestPickerApp:
        return TestPickerApp(candidates, prompt=self.prompt, header=self.header)

    async def select(self, candidates: Sequence[str]) -> list[str]:
        if not candidates:
            return []
        chosen = await self.create_app(candidates).run_async()
        return list(chosen or [])
