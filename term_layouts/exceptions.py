"""Custom exception hierarchy for term-layouts.

This module provides a structured exception hierarchy that enables:
- Consistent error handling across the application
- Rich error context for debugging
- User-friendly error messages
- Error categorization for different handling strategies
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class TermLayoutsError(Exception):
    """Base exception for all term-layouts errors.

    Attributes:
        message: Human-readable error description.
        context: Additional context for debugging.
        timestamp: When the error occurred.
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now()
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Layout Errors
# =============================================================================


class ValidationError(TermLayoutsError):
    """Raised when a submitted value fails validation (e.g. a blank name)."""

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        field: str | None = None,
        value: Any = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = str(value)[:100]  # Truncate long values
        super().__init__(message, context=ctx, cause=cause)


class DuplicateNameError(TermLayoutsError):
    """Raised when a layout name is already taken."""

    def __init__(
        self,
        name: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.name = name
        super().__init__(
            f'A layout named "{name}" already exists',
            context=context,
            cause=cause,
        )


class NotFoundError(TermLayoutsError):
    """Base class for lookups that must find a record."""

    pass


class LayoutNotFoundError(NotFoundError):
    """Raised when an operation needs a layout that does not exist."""

    def __init__(
        self,
        layout_id: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.layout_id = layout_id
        ctx = context or {}
        ctx["layout_id"] = layout_id
        super().__init__("Layout not found", context=ctx, cause=cause)


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(TermLayoutsError):
    """Base class for persistence medium failures."""

    pass


class StorageReadError(StorageError):
    """Raised when the persisted document cannot be read or parsed."""

    def __init__(
        self,
        message: str = "Failed to read layout storage",
        *,
        key: str | None = None,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class StorageWriteError(StorageError):
    """Raised when the persisted document cannot be written."""

    def __init__(
        self,
        message: str = "Failed to write layout storage",
        *,
        key: str | None = None,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(TermLayoutsError):
    """Base class for configuration-related errors."""

    pass


class ConfigLoadError(ConfigError):
    """Raised when configuration file fails to load."""

    def __init__(
        self,
        message: str = "Failed to load configuration",
        *,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(
        self,
        message: str = "Configuration validation failed",
        *,
        field: str | None = None,
        value: Any = None,
        expected: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = str(value)[:100]
        if expected:
            ctx["expected"] = expected
        super().__init__(message, context=ctx, cause=cause)


class ConfigSaveError(ConfigError):
    """Raised when configuration fails to save."""

    def __init__(
        self,
        message: str = "Failed to save configuration",
        *,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Terminal Host Errors
# =============================================================================


class TerminalHostError(TermLayoutsError):
    """Base class for failures reported by the terminal host."""

    pass


class ItermConnectionError(TerminalHostError):
    """Raised when iTerm2 connection fails."""

    def __init__(
        self,
        message: str = "Failed to connect to iTerm2",
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, context=context, cause=cause)


class ItermNotConnectedError(TerminalHostError):
    """Raised when operation requires connection but not connected."""

    def __init__(self, operation: str = "unknown") -> None:
        super().__init__(
            "Not connected to iTerm2",
            context={"attempted_operation": operation},
        )


class TerminalSpawnError(TerminalHostError):
    """Raised when the host fails to create or split a terminal."""

    def __init__(
        self,
        message: str = "Failed to create terminal",
        *,
        terminal_name: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if terminal_name:
            ctx["terminal_name"] = terminal_name
        super().__init__(message, context=ctx, cause=cause)


class SettleTimeoutError(TerminalHostError):
    """Raised when host state does not reach the expected condition in time."""

    def __init__(
        self,
        message: str = "Terminal host did not settle in time",
        *,
        timeout: float | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if timeout is not None:
            ctx["timeout_seconds"] = timeout
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Error Registry for Categorization
# =============================================================================


@dataclass
class ErrorStats:
    """Track error statistics for monitoring."""

    total_count: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    recent_errors: list[tuple[datetime, str, str]] = field(default_factory=list)
    max_recent: int = 100

    def record(self, error: Exception) -> None:
        """Record an error occurrence."""
        self.total_count += 1
        type_name = type(error).__name__
        self.by_type[type_name] = self.by_type.get(type_name, 0) + 1

        self.recent_errors.append((datetime.now(), type_name, str(error)[:200]))
        if len(self.recent_errors) > self.max_recent:
            self.recent_errors.pop(0)


# Global error stats tracker
error_stats = ErrorStats()


def record_error(error: Exception) -> None:
    """Record an error to global stats."""
    error_stats.record(error)
