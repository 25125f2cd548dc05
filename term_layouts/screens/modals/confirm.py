"""Yes/no confirmation modal."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class ConfirmModal(ModalScreen[bool]):
    """Modal for a binary decision.

    Returns True if confirmed, False if declined or dismissed.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes", show=False),
        Binding("n", "cancel", "No", show=False),
    ]

    DEFAULT_CSS = """
    ConfirmModal {
        align: center middle;
    }

    ConfirmModal #dialog {
        width: 60;
        height: auto;
        border: thick $warning;
        background: $surface;
        padding: 1 2;
    }

    ConfirmModal #message {
        padding-bottom: 1;
    }

    ConfirmModal #buttons {
        margin-top: 1;
        height: 3;
        align: center middle;
    }

    ConfirmModal Button {
        margin: 0 1;
    }
    """

    def __init__(self, message: str, *, confirm_label: str = "Yes", cancel_label: str = "No") -> None:
        super().__init__()
        self._message = message
        self._confirm_label = confirm_label
        self._cancel_label = cancel_label

    def compose(self) -> ComposeResult:
        variant = "error" if self._confirm_label.lower() == "delete" else "primary"
        yield Vertical(
            Static(self._message, id="message"),
            Horizontal(
                Button(self._cancel_label, variant="default", id="cancel"),
                Button(self._confirm_label, variant=variant, id="confirm"),
                id="buttons",
            ),
            id="dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#cancel", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)
