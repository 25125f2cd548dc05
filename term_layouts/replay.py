"""Replaying layouts against a terminal host.

This module recreates a layout's groups as host terminals and captures the
terminals that are currently open as unsaved specs.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Mapping

from .exceptions import SettleTimeoutError
from .models import AppSettings, TerminalGroup, TerminalLayout, TerminalSpec
from .paths import resolve_working_directory
from .ports import CreateTerminalOptions, TerminalHandle, TerminalHost

logger = logging.getLogger(__name__)

MAX_SETTLE_DELAY = 0.5  # Seconds between post-condition polls, upper bound


@dataclass
class ReplayResult:
    """Result of applying a layout."""

    layout_name: str
    terminals_created: int = 0
    groups_created: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Summary suitable for showing to the operator."""
        groups_info = "1 group" if self.groups_created == 1 else f"{self.groups_created} groups"
        return (
            f'Layout "{self.layout_name}" applied! '
            f"{self.terminals_created} terminal(s) in {groups_info}."
        )


async def wait_for_condition(
    check: Callable[[], Awaitable[bool]],
    *,
    timeout: float,
    initial_delay: float = 0.05,
    max_delay: float = MAX_SETTLE_DELAY,
) -> None:
    """Poll ``check`` with exponential backoff until it returns True.

    Raises:
        SettleTimeoutError: If the condition does not hold within ``timeout``.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    delay = initial_delay

    while True:
        if await check():
            return
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise SettleTimeoutError(timeout=timeout)
        await asyncio.sleep(min(delay, remaining))
        delay = min(delay * 2, max_delay)


class LayoutReplayer:
    """Creates host terminals for a layout, one group at a time."""

    def __init__(
        self,
        host: TerminalHost,
        settings: AppSettings | None = None,
        *,
        workspace_root: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.host = host
        self.settings = settings or AppSettings()
        self.workspace_root = workspace_root or self.settings.workspace_root
        self.environ = environ

    async def open_terminal_count(self) -> int:
        """Return the number of terminals currently open in the host."""
        return len(await self.host.list_terminals())

    async def capture_current_terminals(self) -> list[TerminalSpec]:
        """Describe the open terminals as specs.

        Only what the host reports is captured (name and, when available, the
        working directory); commands and environment must be added by hand.
        """
        handles = await self.host.list_terminals()
        specs = []
        for index, handle in enumerate(handles, start=1):
            name = handle.name.strip() or f"Terminal {index}"
            specs.append(TerminalSpec(name=name, cwd=handle.working_directory))
        logger.debug("Captured %d open terminals: %s", len(specs), [s.name for s in specs])
        return specs

    async def close_all_terminals(self) -> int:
        """Dispose every open terminal. Returns how many were closed."""
        handles = await self.host.list_terminals()
        for handle in handles:
            await self.host.dispose_terminal(handle)
        logger.info("Closed %d existing terminals", len(handles))
        return len(handles)

    async def apply_layout(
        self,
        layout: TerminalLayout,
        close_existing: bool = False,
    ) -> ReplayResult:
        """Recreate every group of ``layout`` in order.

        A group is started only after the previous group's terminals exist in
        the host. Terminals already created stay open if a later step fails.
        """
        logger.info("Applying layout '%s' with %d groups", layout.name, layout.group_count)
        result = ReplayResult(layout_name=layout.name)

        if close_existing:
            await self.close_all_terminals()

        for index, group in enumerate(layout.groups, start=1):
            if not group.terminals:
                continue
            logger.debug(
                "Creating group %d: %s", index, [spec.name for spec in group.terminals]
            )
            await self._create_group(group, result)
            result.groups_created += 1

        logger.info(
            "Layout '%s' applied: %d terminals in %d groups",
            layout.name,
            result.terminals_created,
            result.groups_created,
        )
        return result

    async def _create_group(self, group: TerminalGroup, result: ReplayResult) -> None:
        root_spec = group.terminals[0]
        before = await self.open_terminal_count()
        handle = await self.host.create_terminal(self._options_for(root_spec, result))
        root = await self._settle_new_terminal(before, handle)
        result.terminals_created += 1
        await self._run_command(root, root_spec)

        for spec in group.terminals[1:]:
            logger.debug("Splitting '%s' from '%s'", spec.name, root_spec.name)
            before = await self.open_terminal_count()
            handle = await self.host.split_terminal(
                root,
                self._options_for(spec, result),
                vertical=self.settings.split_vertical,
            )
            terminal = await self._settle_new_terminal(before, handle)
            await self.host.rename_terminal(terminal, spec.name)
            result.terminals_created += 1
            await self._run_command(terminal, spec)

    async def _settle_new_terminal(
        self,
        count_before: int,
        handle: TerminalHandle | None,
    ) -> TerminalHandle:
        """Wait until the host lists one more terminal than before."""

        async def grown() -> bool:
            return await self.open_terminal_count() > count_before

        await wait_for_condition(
            grown,
            timeout=self.settings.settle_timeout_seconds,
            initial_delay=self.settings.settle_initial_delay_seconds,
        )
        if handle is not None:
            return handle
        # Host did not report the new terminal; the newest one is it
        return (await self.host.list_terminals())[-1]

    async def _run_command(self, handle: TerminalHandle, spec: TerminalSpec) -> None:
        if not spec.command:
            return
        await asyncio.sleep(self.settings.command_delay_seconds)
        await self.host.send_text(handle, spec.command)

    def _options_for(self, spec: TerminalSpec, result: ReplayResult) -> CreateTerminalOptions:
        return CreateTerminalOptions(
            name=spec.name,
            working_directory=self._working_directory_for(spec, result),
            environment=dict(spec.env or {}),
            icon=spec.icon,
            color=spec.color,
            profile=spec.profile_name,
        )

    def _working_directory_for(self, spec: TerminalSpec, result: ReplayResult) -> str | None:
        if not spec.cwd:
            return None

        resolved = resolve_working_directory(spec.cwd, self.workspace_root, self.environ)
        if resolved is None:
            result.warnings.append(
                f'Terminal "{spec.name}": no workspace root to resolve "{spec.cwd}"; '
                "using the default directory."
            )
            return None

        if not resolved.is_dir():
            result.warnings.append(
                f'Terminal "{spec.name}": directory "{spec.cwd}" does not exist; '
                "using the default directory."
            )
            logger.warning("Working directory %s for '%s' not found", resolved, spec.name)
            return None

        return str(resolved)
