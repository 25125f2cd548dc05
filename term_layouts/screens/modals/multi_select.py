"""Multi-choice picker modal.

Used to pick the terminals of one split group.
"""

from __future__ import annotations

from typing import Any, Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, SelectionList, Static

from term_layouts.prompts import Choice

from .select import choice_prompt


class MultiSelectModal(ModalScreen[list[Any]]):
    """Modal for picking zero or more choices.

    Returns the picked values in the order they were picked. Dismissing
    returns an empty list, which callers treat as "nothing picked".
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+s", "done", "Done"),
    ]

    DEFAULT_CSS = """
    MultiSelectModal {
        align: center middle;
    }

    MultiSelectModal #dialog {
        width: 80;
        height: auto;
        max-height: 80%;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    MultiSelectModal #title {
        text-style: bold;
        color: $text-muted;
    }

    MultiSelectModal #prompt {
        text-style: bold;
        padding-bottom: 1;
    }

    MultiSelectModal SelectionList {
        height: auto;
        max-height: 20;
    }

    MultiSelectModal #buttons {
        margin-top: 1;
        height: 3;
        align: center middle;
    }

    MultiSelectModal Button {
        margin: 0 1;
    }
    """

    def __init__(self, prompt: str, choices: Sequence[Choice[Any]], *, title: str = "") -> None:
        super().__init__()
        self._prompt = prompt
        self._choices = list(choices)
        self._title = title

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self._title, id="title"),
            Static(self._prompt, id="prompt"),
            SelectionList[int](
                *((choice_prompt(choice), index) for index, choice in enumerate(self._choices)),
                id="choices",
            ),
            Horizontal(
                Button("Cancel", variant="default", id="cancel"),
                Button("Done", variant="primary", id="done"),
                id="buttons",
            ),
            id="dialog",
        )

    def on_mount(self) -> None:
        if not self._title:
            self.query_one("#title", Static).display = False
        self.query_one("#choices", SelectionList).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.action_cancel()
        elif event.button.id == "done":
            self.action_done()

    def values_for(self, indexes: Sequence[int]) -> list[Any]:
        """Map picked option indexes back to choice values."""
        return [self._choices[index].value for index in indexes if 0 <= index < len(self._choices)]

    def action_done(self) -> None:
        selection = self.query_one("#choices", SelectionList)
        self.dismiss(self.values_for(selection.selected))

    def action_cancel(self) -> None:
        self.dismiss([])
