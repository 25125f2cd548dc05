"""Main Textual app class.

The app owns the iTerm2 connection and the layout services, and runs each
workflow in an exclusive worker so the modals can be awaited.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence, TypeVar

from textual.app import App
from textual.binding import Binding

from term_layouts.config import get_store_dir, load_merged_config
from term_layouts.exceptions import ConfigError, ItermConnectionError
from term_layouts.iterm import ItermController, ItermTerminalHost
from term_layouts.logging_config import log_exception
from term_layouts.models import AppConfig
from term_layouts.partitioner import GroupPartitioner
from term_layouts.ports import TerminalHost
from term_layouts.prompts import CANCELLED, Cancelled, Choice, Severity, Validator
from term_layouts.replay import LayoutReplayer
from term_layouts.repository import LayoutRepository
from term_layouts.screens import LayoutListScreen
from term_layouts.screens.modals import (
    ConfirmModal,
    MultiSelectModal,
    SelectModal,
    TextInputModal,
)
from term_layouts.storage import JsonFileStore
from term_layouts.workflows import LayoutWorkflows

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TextualPrompter:
    """PromptSurface backed by the app's modal screens.

    Must be awaited from inside a worker; ``push_screen_wait`` blocks until
    the modal is dismissed.
    """

    def __init__(self, app: App) -> None:
        self.app = app

    async def ask_text(
        self,
        prompt: str,
        *,
        placeholder: str = "",
        value: str = "",
        validate: Validator | None = None,
    ) -> str | Cancelled:
        return await self.app.push_screen_wait(
            TextInputModal(prompt, placeholder=placeholder, value=value, validate=validate)
        )

    async def choose(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> T | Cancelled:
        if not choices:
            return CANCELLED
        return await self.app.push_screen_wait(SelectModal(prompt, choices, title=title))

    async def choose_many(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> list[T] | Cancelled:
        return await self.app.push_screen_wait(MultiSelectModal(prompt, choices, title=title))

    async def confirm(
        self,
        message: str,
        *,
        confirm_label: str = "Yes",
        cancel_label: str = "No",
    ) -> bool:
        return await self.app.push_screen_wait(
            ConfirmModal(message, confirm_label=confirm_label, cancel_label=cancel_label)
        )

    def notify(self, message: str, severity: Severity = "information") -> None:
        self.app.notify(message, severity=severity)


class TermLayoutsApp(App):
    """Terminal layouts TUI."""

    TITLE = "Terminal Layouts"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False),
    ]

    # Workflow names accepted by start_workflow
    WORKFLOWS = {
        "save_current": ("save_current_layout", "Save failed"),
        "create": ("create_layout", "Create failed"),
        "load": ("load_layout", "Load failed"),
        "load_by_id": ("load_layout_by_id", "Load failed"),
        "list": ("list_layouts", "List failed"),
        "edit": ("edit_layout", "Edit failed"),
        "edit_by_id": ("edit_layout_by_id", "Edit failed"),
        "delete": ("delete_layout", "Delete failed"),
        "delete_by_id": ("delete_layout_by_id", "Delete failed"),
    }

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        workspace: str | Path | None = None,
        host: TerminalHost | None = None,
        repository: LayoutRepository | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.workspace = workspace
        self.controller: ItermController | None = None
        self.host = host
        self.repository = repository
        self.workflows: LayoutWorkflows | None = None

    async def on_mount(self) -> None:
        if self.config is None:
            try:
                self.config = load_merged_config(self.workspace)
            except ConfigError as e:
                log_exception(logger, e, "Failed to load config")
                self.notify(f"Config error, using defaults: {e.message}", severity="warning")
                self.config = AppConfig()

        if self.repository is None:
            self.repository = LayoutRepository(JsonFileStore(get_store_dir(self.config)))

        if self.host is None:
            self.controller = ItermController()
            try:
                await self.controller.connect()
            except ItermConnectionError as e:
                log_exception(logger, e, "iTerm2 connection failed", include_traceback=False)
                self.notify(f"iTerm2 connection failed: {e.message}", severity="warning")
            self.host = ItermTerminalHost(self.controller)

        prompter = TextualPrompter(self)
        self.workflows = LayoutWorkflows(
            repository=self.repository,
            replayer=LayoutReplayer(self.host, self.config.settings),
            partitioner=GroupPartitioner(prompter),
            prompter=prompter,
        )

        self.push_screen(LayoutListScreen())

    def start_workflow(self, name: str, *args: Any) -> None:
        """Run a named workflow in the exclusive workflow worker."""
        method_name, label = self.WORKFLOWS[name]
        self.run_worker(
            self._run_workflow(method_name, label, args),
            name=name,
            group="workflow",
            exclusive=True,
        )

    async def _run_workflow(self, method_name: str, label: str, args: tuple[Any, ...]) -> None:
        if self.workflows is None:
            return
        method = getattr(self.workflows, method_name)
        await self.workflows.run(lambda: method(*args), label)

        if isinstance(self.screen, LayoutListScreen):
            self.screen.refresh_layouts()

    async def action_quit(self) -> None:
        if self.controller is not None:
            await self.controller.disconnect()
        self.exit()
