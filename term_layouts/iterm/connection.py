"""iTerm2 connection management.

This module owns the connection lifecycle for iTerm2's Python API.
"""

from __future__ import annotations

import logging

import iterm2

from term_layouts.exceptions import (
    ItermConnectionError,
    ItermNotConnectedError,
)

logger = logging.getLogger(__name__)


class ItermController:
    """Holds the iTerm2 connection and the app object used by the host."""

    def __init__(self) -> None:
        self.connection: iterm2.Connection | None = None
        self.app: iterm2.App | None = None
        self._connected: bool = False

    async def connect(self) -> bool:
        """Establish connection to iTerm2.

        Returns:
            True if connection established successfully.

        Raises:
            ItermConnectionError: If connection fails.
        """
        try:
            self.connection = await iterm2.Connection.async_create()
            self.app = await iterm2.async_get_app(self.connection)
        except ConnectionRefusedError as e:
            self._connected = False
            raise ItermConnectionError(
                "Connection refused. Is iTerm2 running with the Python API enabled?",
                cause=e,
            ) from e
        except OSError as e:
            self._connected = False
            raise ItermConnectionError(f"Failed to connect to iTerm2: {e}", cause=e) from e

        self._connected = True
        logger.info("Connected to iTerm2")
        return True

    async def disconnect(self) -> None:
        """Drop the connection; iTerm2 closes it when it is collected."""
        if self.connection:
            self.connection = None
            self.app = None
            self._connected = False
            logger.info("Disconnected from iTerm2")

    async def reconnect(self) -> bool:
        """Disconnect and connect again.

        Raises:
            ItermConnectionError: If reconnection fails.
        """
        await self.disconnect()
        return await self.connect()

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to iTerm2."""
        return self._connected and self.connection is not None

    def require_connection(self, operation: str = "unknown") -> iterm2.App:
        """Return the app object, raising if not connected.

        Raises:
            ItermNotConnectedError: If not connected to iTerm2.
        """
        if not self.is_connected or self.app is None:
            raise ItermNotConnectedError(operation)
        return self.app
