"""iTerm2 implementation of the terminal host port.

Each layout group opens as a new tab in the current window; the remaining
terminals of the group are split panes of the tab's first session.
"""

from __future__ import annotations

import logging
import re
import shlex

import iterm2

from term_layouts.exceptions import TerminalSpawnError
from term_layouts.iterm.connection import ItermController
from term_layouts.ports import CreateTerminalOptions, TerminalHandle

logger = logging.getLogger(__name__)

# Valid environment variable key: letter or underscore, then letters, digits, underscores
_ENV_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_HEX_COLOR_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def validate_env_key(key: str) -> bool:
    """Return True if ``key`` is safe to use in an ``export`` line."""
    return bool(_ENV_KEY_PATTERN.match(key))


def build_export_line(environment: dict[str, str]) -> str | None:
    """Build a shell ``export`` line for ``environment``.

    Values are shell-quoted. Returns None for an empty mapping.

    Raises:
        ValueError: If any key is not a valid variable name.
    """
    if not environment:
        return None

    pairs = []
    for key, value in environment.items():
        if not validate_env_key(key):
            raise ValueError(
                f"Invalid environment variable key: {key!r}. "
                "Keys must match ^[A-Za-z_][A-Za-z0-9_]*$"
            )
        pairs.append(f"{key}={shlex.quote(str(value))}")
    return f"export {' '.join(pairs)}"


def parse_hex_color(value: str | None) -> iterm2.Color | None:
    """Convert ``#rrggbb`` to an iTerm2 color; anything else yields None."""
    if not value:
        return None
    match = _HEX_COLOR_PATTERN.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    red, green, blue = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return iterm2.Color(red, green, blue)


class ItermTerminalHost:
    """Terminal host backed by a live iTerm2 connection."""

    def __init__(self, controller: ItermController) -> None:
        self.controller = controller

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def _customizations(self, options: CreateTerminalOptions) -> iterm2.LocalWriteOnlyProfile | None:
        """Profile overrides for the directory, name and tab color."""
        customizations = iterm2.LocalWriteOnlyProfile()
        changed = False

        if options.working_directory:
            customizations.set_initial_directory_mode(
                iterm2.InitialWorkingDirectory.INITIAL_WORKING_DIRECTORY_CUSTOM
            )
            customizations.set_custom_directory(options.working_directory)
            changed = True

        if options.name:
            customizations.set_name(options.name)
            changed = True

        color = parse_hex_color(options.color)
        if color is not None:
            customizations.set_use_tab_color(True)
            customizations.set_tab_color(color)
            changed = True
        elif options.color:
            logger.debug("Ignoring non-hex color %r for '%s'", options.color, options.name)

        if options.icon:
            logger.debug("iTerm2 has no terminal icons; ignoring %r", options.icon)

        return customizations if changed else None

    async def _prepare_session(self, session: iterm2.Session, options: CreateTerminalOptions) -> TerminalHandle:
        if options.name:
            await session.async_set_name(options.name)

        try:
            export_line = build_export_line(options.environment)
        except ValueError as e:
            raise TerminalSpawnError(str(e), terminal_name=options.name, cause=e) from e
        if export_line:
            await session.async_send_text(export_line + "\n")

        return TerminalHandle(
            id=session.session_id,
            name=options.name,
            working_directory=options.working_directory,
        )

    async def create_terminal(self, options: CreateTerminalOptions) -> TerminalHandle:
        """Open a new tab, creating a window when none is open.

        Raises:
            ItermNotConnectedError: If not connected to iTerm2.
            TerminalSpawnError: If iTerm2 refuses to create the tab.
        """
        app = self.controller.require_connection("create_terminal")
        customizations = self._customizations(options)

        window = app.current_terminal_window
        if window is None:
            window = await iterm2.Window.async_create(
                self.controller.connection,
                profile=options.profile,
                profile_customizations=customizations,
            )
            if window is None:
                raise TerminalSpawnError("iTerm2 did not create a window", terminal_name=options.name)
            logger.info("Created new iTerm2 window")
            tab = window.current_tab
        else:
            tab = await window.async_create_tab(
                profile=options.profile,
                profile_customizations=customizations,
            )

        session = tab.current_session if tab is not None else None
        if session is None:
            raise TerminalSpawnError("iTerm2 did not create a session", terminal_name=options.name)

        handle = await self._prepare_session(session, options)
        logger.info("Created terminal '%s' (%s)", options.name, handle.id)
        return handle

    async def split_terminal(
        self,
        parent: TerminalHandle,
        options: CreateTerminalOptions,
        *,
        vertical: bool = True,
    ) -> TerminalHandle | None:
        """Split ``parent``; vertical means side by side.

        Raises:
            TerminalSpawnError: If the parent session no longer exists.
        """
        app = self.controller.require_connection("split_terminal")
        parent_session = app.get_session_by_id(parent.id)
        if parent_session is None:
            raise TerminalSpawnError(
                f"Parent terminal {parent.id} not found",
                terminal_name=options.name,
            )

        session = await parent_session.async_split_pane(
            vertical=vertical,
            profile=options.profile,
            profile_customizations=self._customizations(options),
        )
        if session is None:
            logger.debug("Split of %s returned no session", parent.id)
            return None

        handle = await self._prepare_session(session, options)
        logger.info("Split terminal '%s' (%s) from %s (vertical=%s)", options.name, handle.id, parent.id, vertical)
        return handle

    # -------------------------------------------------------------------------
    # Session operations
    # -------------------------------------------------------------------------

    def _session_for(self, handle: TerminalHandle, operation: str) -> iterm2.Session:
        app = self.controller.require_connection(operation)
        session = app.get_session_by_id(handle.id)
        if session is None:
            raise TerminalSpawnError(f"Terminal {handle.id} not found", terminal_name=handle.name)
        return session

    async def rename_terminal(self, handle: TerminalHandle, name: str) -> None:
        session = self._session_for(handle, "rename_terminal")
        await session.async_set_name(name)
        handle.name = name

    async def send_text(self, handle: TerminalHandle, text: str) -> None:
        session = self._session_for(handle, "send_text")
        await session.async_send_text(text + "\n")

    async def dispose_terminal(self, handle: TerminalHandle) -> None:
        session = self._session_for(handle, "dispose_terminal")
        await session.async_close(force=True)
        logger.debug("Closed terminal %s", handle.id)

    async def list_terminals(self) -> list[TerminalHandle]:
        """Every session in every window, in window/tab/pane order."""
        app = self.controller.require_connection("list_terminals")

        handles = []
        for window in app.terminal_windows:
            for tab in window.tabs:
                for session in tab.sessions:
                    name = await session.async_get_variable("name") or session.name or ""
                    path = await session.async_get_variable("path")
                    handles.append(
                        TerminalHandle(
                            id=session.session_id,
                            name=name,
                            working_directory=path or None,
                        )
                    )
        return handles

    async def list_profiles(self) -> list[str]:
        self.controller.require_connection("list_profiles")
        profiles = await iterm2.PartialProfile.async_query(self.controller.connection)
        return sorted(profile.name for profile in profiles if profile.name)
