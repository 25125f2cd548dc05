"""Free-text input modal.

Asks for a single line of text, re-asking while the validator rejects it.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from term_layouts.prompts import CANCELLED, Cancelled, Validator


class TextInputModal(ModalScreen["str | Cancelled"]):
    """Modal for entering text.

    Returns the entered text, or CANCELLED if dismissed.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    TextInputModal {
        align: center middle;
    }

    TextInputModal #dialog {
        width: 70;
        height: auto;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    TextInputModal #prompt {
        text-style: bold;
        padding-bottom: 1;
    }

    TextInputModal #error {
        color: $error;
        height: auto;
    }

    TextInputModal #buttons {
        margin-top: 1;
        height: 3;
        align: center middle;
    }

    TextInputModal Button {
        margin: 0 1;
    }
    """

    def __init__(
        self,
        prompt: str,
        *,
        placeholder: str = "",
        value: str = "",
        validate: Validator | None = None,
    ) -> None:
        super().__init__()
        self._prompt = prompt
        self._placeholder = placeholder
        self._value = value
        self._validate = validate
        self.error_message: str | None = None

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self._prompt, id="prompt"),
            Input(value=self._value, placeholder=self._placeholder, id="text"),
            Static("", id="error"),
            Horizontal(
                Button("Cancel", variant="default", id="cancel"),
                Button("OK", variant="primary", id="ok"),
                id="buttons",
            ),
            id="dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#text", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(CANCELLED)
        elif event.button.id == "ok":
            self.submit(self.query_one("#text", Input).value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.submit(event.value)

    def submit(self, value: str) -> None:
        """Dismiss with ``value`` unless the validator rejects it."""
        error = self._validate(value) if self._validate else None
        self.error_message = error
        if error is not None:
            if self.is_mounted:
                self.query_one("#error", Static).update(error)
            return
        self.dismiss(value)

    def action_cancel(self) -> None:
        self.dismiss(CANCELLED)
