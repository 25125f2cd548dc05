"""Terminal host abstraction layer.

This module defines the protocol the replay layer drives, allowing layouts to be
applied to different terminal implementations (iTerm2, or a mock for testing).

The abstraction follows the "ports and adapters" pattern: this module is the
port and the iterm/ package is an adapter.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class TerminalHandle:
    """Opaque reference to a terminal open in the host."""

    id: str
    """Host identifier for the terminal."""

    name: str = ""
    """Name currently displayed for the terminal."""

    working_directory: str | None = None
    """Current directory, when the host can report it."""


@dataclass
class CreateTerminalOptions:
    """Host-agnostic description of a terminal to open."""

    name: str
    """Display name for the terminal."""

    working_directory: str | None = None
    """Absolute directory to start in, or None for the host default."""

    environment: dict[str, str] = field(default_factory=dict)
    """Environment variables to set."""

    icon: str | None = None
    """Theming hint; hosts may ignore it."""

    color: str | None = None
    """Theming hint; hosts may ignore it."""

    profile: str | None = None
    """Host-defined profile to create the terminal with."""


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class TerminalHost(Protocol):
    """Protocol for the terminal operations needed to replay a layout."""

    @abstractmethod
    async def create_terminal(self, options: CreateTerminalOptions) -> TerminalHandle:
        """Open a new standalone terminal.

        Raises:
            TerminalSpawnError: If the host cannot create the terminal.
        """
        ...

    @abstractmethod
    async def split_terminal(
        self,
        parent: TerminalHandle,
        options: CreateTerminalOptions,
        *,
        vertical: bool = True,
    ) -> TerminalHandle | None:
        """Split ``parent`` and open a new terminal beside it.

        Hosts that cannot report the new terminal return None; callers then
        pick it up from ``list_terminals`` once the host settles.
        """
        ...

    @abstractmethod
    async def rename_terminal(self, handle: TerminalHandle, name: str) -> None:
        """Change the displayed name of a terminal."""
        ...

    @abstractmethod
    async def send_text(self, handle: TerminalHandle, text: str) -> None:
        """Type ``text`` into a terminal followed by a newline."""
        ...

    @abstractmethod
    async def list_terminals(self) -> list[TerminalHandle]:
        """Return every open terminal, oldest first."""
        ...

    @abstractmethod
    async def dispose_terminal(self, handle: TerminalHandle) -> None:
        """Close a terminal."""
        ...

    @abstractmethod
    async def list_profiles(self) -> list[str]:
        """Return the names of the host's terminal profiles."""
        ...
