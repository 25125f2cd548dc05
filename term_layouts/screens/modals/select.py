"""Single-choice picker modal."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from term_layouts.prompts import CANCELLED, Choice

logger = logging.getLogger(__name__)


def choice_prompt(choice: Choice[Any]) -> Text:
    """Render a choice as a label line plus optional muted detail lines."""
    text = Text(choice.label, style="bold")
    if choice.description:
        text.append(f"  {choice.description}", style="dim")
    if choice.detail:
        text.append(f"\n  {choice.detail}", style="dim italic")
    return text


class SelectModal(ModalScreen[Any]):
    """Modal for picking exactly one choice.

    Returns the picked choice's value, or CANCELLED if dismissed.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    SelectModal {
        align: center middle;
    }

    SelectModal #dialog {
        width: 80;
        height: auto;
        max-height: 80%;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    SelectModal #title {
        text-style: bold;
        color: $text-muted;
    }

    SelectModal #prompt {
        text-style: bold;
        padding-bottom: 1;
    }

    SelectModal OptionList {
        height: auto;
        max-height: 20;
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
            OptionList(
                *(Option(choice_prompt(choice), id=str(index)) for index, choice in enumerate(self._choices)),
                id="options",
            ),
            id="dialog",
        )

    def on_mount(self) -> None:
        if not self._title:
            self.query_one("#title", Static).display = False
        self.query_one("#options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.select_index(event.option_index)

    def select_index(self, index: int) -> None:
        """Dismiss with the value of the choice at ``index``."""
        if 0 <= index < len(self._choices):
            self.dismiss(self._choices[index].value)
        else:
            logger.debug("Ignoring out-of-range option %d", index)

    def action_cancel(self) -> None:
        self.dismiss(CANCELLED)
