"""Layout browser.

Main screen: a table of saved layouts with keys for every workflow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from term_layouts.models import TerminalLayout

if TYPE_CHECKING:
    from term_layouts.app import TermLayoutsApp


class LayoutListScreen(Screen):
    """Browse saved layouts.

    Enter applies the highlighted layout; the other bindings start the
    matching workflow, which prompts through modals.
    """

    BINDINGS = [
        Binding("enter", "load_selected", "Load"),
        Binding("s", "save_current", "Save Current"),
        Binding("n", "create", "New"),
        Binding("l", "load", "Pick & Load"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
        Binding("r", "refresh", "Refresh"),
    ]

    DEFAULT_CSS = """
    LayoutListScreen #layout-table {
        height: 1fr;
    }

    LayoutListScreen #empty-message {
        padding: 2 4;
    }
    """

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            DataTable(id="layout-table"),
            Static("", id="empty-message"),
            id="main",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#layout-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Name", "Terminals", "Groups", "Description", "Updated")
        self.refresh_layouts()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """DataTable swallows Enter, so bridge it to the load action."""
        self.action_load_selected()

    @property
    def _app(self) -> TermLayoutsApp:
        return self.app  # type: ignore[return-value]

    def refresh_layouts(self) -> None:
        """Reload the table from the repository."""
        table = self.query_one("#layout-table", DataTable)
        empty_message = self.query_one("#empty-message", Static)
        table.clear()

        layouts = self._app.repository.get_all() if self._app.repository else []
        if not layouts:
            table.display = False
            empty_message.update(
                "[dim]No layouts saved yet.\n\n"
                "Press [bold]s[/bold] to save the open terminals "
                "or [bold]n[/bold] to create a layout.[/dim]"
            )
            empty_message.display = True
            return

        table.display = True
        empty_message.display = False
        for layout in layouts:
            table.add_row(*self._row_for(layout), key=layout.id)

    @staticmethod
    def _row_for(layout: TerminalLayout) -> tuple[str, str, str, str, str]:
        return (
            layout.name,
            str(layout.terminal_count),
            str(layout.group_count),
            layout.description or "",
            layout.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        )

    def selected_layout_id(self) -> str | None:
        """Return the id of the highlighted row, if any."""
        table = self.query_one("#layout-table", DataTable)
        if not table.display or table.row_count == 0:
            return None
        cell_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        return cell_key.row_key.value

    def action_load_selected(self) -> None:
        layout_id = self.selected_layout_id()
        if layout_id is None:
            self.action_load()
            return
        self._app.start_workflow("load_by_id", layout_id)

    def action_save_current(self) -> None:
        self._app.start_workflow("save_current")

    def action_create(self) -> None:
        self._app.start_workflow("create")

    def action_load(self) -> None:
        self._app.start_workflow("load")

    def action_edit(self) -> None:
        layout_id = self.selected_layout_id()
        if layout_id is None:
            self._app.start_workflow("edit")
        else:
            self._app.start_workflow("edit_by_id", layout_id)

    def action_delete(self) -> None:
        layout_id = self.selected_layout_id()
        if layout_id is None:
            self._app.start_workflow("delete")
        else:
            self._app.start_workflow("delete_by_id", layout_id)

    def action_refresh(self) -> None:
        self.refresh_layouts()
