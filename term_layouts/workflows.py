"""Interactive layout workflows.

Each workflow wires operator prompts to the repository, the partitioner and the
replayer. Declining any prompt ends the workflow silently; whatever already
happened (terminals created, records written) stays in place.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from .exceptions import (
    DuplicateNameError,
    LayoutNotFoundError,
    NotFoundError,
    TermLayoutsError,
    ValidationError,
    record_error,
)
from .logging_config import log_exception
from .models import TerminalGroup, TerminalLayout, TerminalSpec
from .partitioner import GroupPartitioner
from .prompts import Choice, PromptSurface, is_cancelled, validate_layout_name
from .replay import LayoutReplayer, ReplayResult
from .repository import LayoutRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PROFILE_LABEL = "System default"


def _optional_text(value: object) -> str | None:
    """Trimmed text, or None for a cancelled/empty answer."""
    if is_cancelled(value) or not isinstance(value, str):
        return None
    return value.strip() or None


def ensure_name_available(
    repository: LayoutRepository,
    name: str,
    exclude_id: str | None = None,
) -> str:
    """Validate and normalize a layout name.

    Raises:
        ValidationError: If the name is blank.
        DuplicateNameError: If another layout already uses it.
    """
    error = validate_layout_name(name)
    if error:
        raise ValidationError(error, field="name", value=name)
    name = name.strip()
    if repository.name_exists(name, exclude_id):
        raise DuplicateNameError(name)
    return name


def create_named_layout(
    repository: LayoutRepository,
    name: str,
    groups: list[TerminalGroup],
    description: str | None = None,
) -> TerminalLayout:
    """Create and persist a layout, enforcing a unique name."""
    layout = TerminalLayout.create(
        name=ensure_name_available(repository, name),
        groups=groups,
        description=description,
    )
    repository.save(layout)
    return layout


def rename_layout_to(repository: LayoutRepository, layout_id: str, new_name: str) -> TerminalLayout:
    """Rename a layout; renaming to its current name changes nothing.

    Raises:
        LayoutNotFoundError: If ``layout_id`` is unknown.
    """
    layout = repository.get(layout_id)
    if layout is None:
        raise LayoutNotFoundError(layout_id)
    if new_name.strip() == layout.name:
        return layout
    name = ensure_name_available(repository, new_name, exclude_id=layout_id)
    return repository.update(layout_id, name=name)


class LayoutWorkflows:
    """The operator-facing layout commands."""

    def __init__(
        self,
        repository: LayoutRepository,
        replayer: LayoutReplayer,
        partitioner: GroupPartitioner,
        prompter: PromptSurface,
    ) -> None:
        self.repository = repository
        self.replayer = replayer
        self.partitioner = partitioner
        self.prompter = prompter

    # -------------------------------------------------------------------------
    # Top-level error handling
    # -------------------------------------------------------------------------

    async def run(self, operation: Callable[[], Awaitable[T]], label: str) -> T | None:
        """Run a workflow, reporting any error to the operator.

        Duplicate-name and not-found errors end only the current workflow.
        Storage and host errors are logged with their traceback. Nothing is
        retried.
        """
        try:
            return await operation()
        except (DuplicateNameError, NotFoundError, ValidationError) as e:
            logger.info("%s: %s", label, e)
            self.prompter.notify(e.message, severity="error")
        except TermLayoutsError as e:
            record_error(e)
            log_exception(logger, e, label)
            self.prompter.notify(f"{label}: {e.message}", severity="error")
        return None

    # -------------------------------------------------------------------------
    # Non-interactive helpers
    # -------------------------------------------------------------------------

    def ensure_name_available(self, name: str, exclude_id: str | None = None) -> str:
        return ensure_name_available(self.repository, name, exclude_id)

    def create_named_layout(
        self,
        name: str,
        groups: list[TerminalGroup],
        description: str | None = None,
    ) -> TerminalLayout:
        return create_named_layout(self.repository, name, groups, description)

    def rename_layout_to(self, layout_id: str, new_name: str) -> TerminalLayout:
        return rename_layout_to(self.repository, layout_id, new_name)

    # -------------------------------------------------------------------------
    # Save / create
    # -------------------------------------------------------------------------

    async def save_current_layout(self) -> TerminalLayout | None:
        """Capture the open terminals and save them as a new layout."""
        specs = await self.replayer.capture_current_terminals()

        if not specs:
            if not await self.prompter.confirm("No terminals are open. Create an empty layout?"):
                return None

        names = ", ".join(spec.name for spec in specs)
        prompt = f"Saving terminals: {names} | Enter the layout name" if specs else "Enter the layout name"
        name = await self.prompter.ask_text(
            prompt,
            placeholder="e.g. Dev Layout",
            validate=validate_layout_name,
        )
        if is_cancelled(name) or not name:
            return None
        name = self.ensure_name_available(name)

        groups = await self.partitioner.partition(specs)
        if is_cancelled(groups):
            return None

        description = await self.prompter.ask_text(
            "Enter a description for the layout (optional)",
            placeholder="e.g. Terminals for project X",
        )

        layout = self.create_named_layout(name, groups, _optional_text(description))
        self.prompter.notify(f'Layout "{layout.name}" saved! {layout.summary}.')
        return layout

    async def create_layout(self) -> TerminalLayout | None:
        """Author a new layout terminal by terminal."""
        self.prompter.notify("Creating a new layout: add terminals, then arrange them in groups.")

        name = await self.prompter.ask_text(
            "Enter the layout name",
            placeholder="e.g. Full Stack Development",
            validate=validate_layout_name,
        )
        if is_cancelled(name) or not name:
            return None
        name = self.ensure_name_available(name)

        description = await self.prompter.ask_text(
            "Enter a description for the layout (optional)",
            placeholder="e.g. Frontend and backend terminals",
        )

        specs = await self._collect_terminals()
        if not specs:
            self.prompter.notify("No terminals added. Layout was not created.", severity="warning")
            return None

        groups = await self.partitioner.partition(specs)
        if is_cancelled(groups):
            return None

        layout = self.create_named_layout(name, groups, _optional_text(description))
        self.prompter.notify(f'Layout "{layout.name}" created! {layout.summary}.')
        return layout

    async def _collect_terminals(self) -> list[TerminalSpec]:
        specs: list[TerminalSpec] = []

        while True:
            terminal_name = await self.prompter.ask_text(
                f"Terminal {len(specs) + 1}: enter the name",
                placeholder="e.g. Backend Server",
            )
            if is_cancelled(terminal_name) or not terminal_name.strip():
                break

            profile_name = await self._select_profile()

            command = await self.prompter.ask_text(
                f'Terminal "{terminal_name}": command to run (optional)',
                placeholder="e.g. npm run dev",
            )
            cwd = await self.prompter.ask_text(
                f'Terminal "{terminal_name}": working directory (optional)',
                placeholder="e.g. ./backend",
            )

            specs.append(
                TerminalSpec(
                    name=terminal_name,
                    profile_name=profile_name,
                    command=_optional_text(command),
                    cwd=_optional_text(cwd),
                )
            )

            add_more = await self.prompter.choose(
                f"{len(specs)} terminal(s) added",
                [Choice("Add another terminal", True), Choice("Finish", False)],
            )
            if add_more is not True:
                break

        return specs

    async def _select_profile(self) -> str | None:
        profiles = await self.replayer.host.list_profiles()
        choices: list[Choice[str | None]] = [Choice(DEFAULT_PROFILE_LABEL, None)]
        choices.extend(Choice(profile, profile) for profile in profiles)

        selected = await self.prompter.choose(
            "Select the terminal profile (optional)",
            choices,
            title="Terminal Profile",
        )
        if is_cancelled(selected):
            return None
        return selected

    # -------------------------------------------------------------------------
    # Load / list
    # -------------------------------------------------------------------------

    def _layout_choices(self, layouts: list[TerminalLayout]) -> list[Choice[TerminalLayout | None]]:
        return [
            Choice(
                label=layout.name,
                value=layout,
                description=layout.summary,
                detail=layout.description or "No description",
            )
            for layout in layouts
        ]

    async def load_layout(self) -> ReplayResult | None:
        """Pick a saved layout and apply it."""
        layouts = self.repository.get_all()

        if not layouts:
            if await self.prompter.confirm(
                "No layouts saved yet. Create a new one?",
                confirm_label="Create Layout",
                cancel_label="Cancel",
            ):
                await self.create_layout()
            return None

        selected = await self.prompter.choose(
            "Select a layout to load",
            self._layout_choices(layouts),
        )
        if is_cancelled(selected) or selected is None:
            return None

        return await self.apply_layout(
            selected,
            ask_close_existing=self.replayer.settings.confirm_close_existing,
        )

    async def load_layout_by_id(self, layout_id: str) -> ReplayResult | None:
        """Apply one saved layout."""
        layout = self.repository.get(layout_id)
        if layout is None:
            raise LayoutNotFoundError(layout_id)
        return await self.apply_layout(
            layout,
            ask_close_existing=self.replayer.settings.confirm_close_existing,
        )

    async def apply_layout(
        self,
        layout: TerminalLayout,
        *,
        ask_close_existing: bool = False,
    ) -> ReplayResult | None:
        """Apply ``layout``, optionally asking what to do with open terminals."""
        close_existing = False
        if ask_close_existing and await self.replayer.open_terminal_count() > 0:
            choice = await self.prompter.choose(
                "What should happen to the open terminals?",
                [
                    Choice("Keep existing terminals", False),
                    Choice("Close existing terminals", True),
                ],
            )
            if is_cancelled(choice):
                return None
            close_existing = choice

        result = await self.replayer.apply_layout(layout, close_existing=close_existing)
        for warning in result.warnings:
            self.prompter.notify(warning, severity="warning")
        self.prompter.notify(result.message)
        return result

    async def list_layouts(self) -> None:
        """Browse layouts and pick an action for one."""
        layouts = self.repository.get_all()

        if not layouts:
            self.prompter.notify("No layouts saved yet.")
            return

        choices = self._layout_choices(layouts)
        choices.insert(
            0,
            Choice(label="Create New Layout", value=None, detail="Create a new terminal layout"),
        )

        selected = await self.prompter.choose(
            "Saved layouts - select one for more options",
            choices,
        )
        if is_cancelled(selected):
            return
        if selected is None:
            await self.create_layout()
            return

        action = await self.prompter.choose(
            f'Actions for "{selected.name}"',
            [
                Choice("Load", "load"),
                Choice("Edit", "edit"),
                Choice("Delete", "delete"),
            ],
        )
        if action == "load":
            await self.apply_layout(selected)
        elif action == "edit":
            await self.edit_layout_by_id(selected.id)
        elif action == "delete":
            await self.delete_layout_by_id(selected.id)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete_layout(self) -> bool:
        """Pick a layout and delete it after confirmation."""
        layouts = self.repository.get_all()

        if not layouts:
            self.prompter.notify("No saved layouts to delete.")
            return False

        selected = await self.prompter.choose(
            "Select a layout to delete",
            self._layout_choices(layouts),
        )
        if is_cancelled(selected) or selected is None:
            return False

        return await self.delete_layout_by_id(selected.id)

    async def delete_layout_by_id(self, layout_id: str) -> bool:
        """Delete one layout after confirmation."""
        layout = self.repository.get(layout_id)
        if layout is None:
            self.prompter.notify("Layout not found.", severity="error")
            return False

        if not await self.prompter.confirm(
            f'Are you sure you want to delete the layout "{layout.name}"?',
            confirm_label="Delete",
            cancel_label="Cancel",
        ):
            return False

        if self.repository.delete(layout_id):
            self.prompter.notify(f'Layout "{layout.name}" deleted.')
            return True

        self.prompter.notify("Failed to delete layout.", severity="error")
        return False

    # -------------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------------

    async def edit_layout(self) -> None:
        """Pick a layout and edit it."""
        layouts = self.repository.get_all()

        if not layouts:
            self.prompter.notify("No saved layouts to edit.")
            return

        selected = await self.prompter.choose(
            "Select a layout to edit",
            self._layout_choices(layouts),
        )
        if is_cancelled(selected) or selected is None:
            return

        await self.edit_layout_by_id(selected.id)

    async def edit_layout_by_id(self, layout_id: str) -> None:
        """Choose which part of a layout to edit."""
        layout = self.repository.get(layout_id)
        if layout is None:
            self.prompter.notify("Layout not found.", severity="error")
            return

        action = await self.prompter.choose(
            f'Edit layout "{layout.name}"',
            [
                Choice("Edit name", "name"),
                Choice("Edit description", "description"),
                Choice("Update with the current terminals", "structure"),
            ],
        )
        if action == "name":
            await self.rename_layout(layout)
        elif action == "description":
            await self.edit_description(layout)
        elif action == "structure":
            await self.update_layout_structure(layout)

    async def rename_layout(self, layout: TerminalLayout) -> TerminalLayout | None:
        """Ask for a new name; keeping the current name is a no-op."""
        new_name = await self.prompter.ask_text(
            "Enter the new layout name",
            value=layout.name,
            validate=validate_layout_name,
        )
        if is_cancelled(new_name) or not new_name or new_name.strip() == layout.name:
            return None

        updated = self.rename_layout_to(layout.id, new_name)
        self.prompter.notify(f'Name updated to "{updated.name}"')
        return updated

    async def edit_description(self, layout: TerminalLayout) -> TerminalLayout | None:
        """Replace a layout's description; an empty answer clears it."""
        new_description = await self.prompter.ask_text(
            "Enter the new layout description",
            value=layout.description or "",
        )
        if is_cancelled(new_description):
            return None

        updated = self.repository.update(layout.id, description=_optional_text(new_description))
        self.prompter.notify("Description updated.")
        return updated

    async def update_layout_structure(self, layout: TerminalLayout) -> TerminalLayout | None:
        """Replace a layout's groups with the currently open terminals."""
        specs = await self.replayer.capture_current_terminals()

        if not specs:
            if not await self.prompter.confirm("No terminals are open. Clear the layout?"):
                return None

        groups = await self.partitioner.partition(specs)
        if is_cancelled(groups):
            return None

        updated = self.repository.update(layout.id, groups=groups)
        self.prompter.notify(f"Layout updated! {updated.summary}.")
        return updated
