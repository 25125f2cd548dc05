"""Interactive prompt surface used by the partitioner and the workflows.

Every prompt either yields a value or ``CANCELLED``. An empty answer (no items
picked, empty text) is a value, so "nothing selected" and "operator backed out"
stay distinguishable at every call site.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Literal, Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")

Severity = Literal["information", "warning", "error"]

# Returns an error message for invalid input, None when valid
Validator = Callable[[str], "str | None"]


class Cancelled(Enum):
    """Marker returned when the operator declines a prompt."""

    CANCELLED = "cancelled"


CANCELLED = Cancelled.CANCELLED


def is_cancelled(value: object) -> bool:
    """Return True if ``value`` is the cancellation marker."""
    return value is CANCELLED


@dataclass
class Choice(Generic[T]):
    """One selectable entry of a single- or multi-select prompt."""

    label: str
    value: T
    description: str = ""
    detail: str = ""


def validate_layout_name(value: str) -> str | None:
    """Reject blank layout names."""
    if not value or not value.strip():
        return "Layout name cannot be empty"
    return None


@runtime_checkable
class PromptSurface(Protocol):
    """Protocol for the operator-facing dialogs."""

    @abstractmethod
    async def ask_text(
        self,
        prompt: str,
        *,
        placeholder: str = "",
        value: str = "",
        validate: Validator | None = None,
    ) -> str | Cancelled:
        """Ask for free text; ``validate`` keeps re-asking until it returns None."""
        ...

    @abstractmethod
    async def choose(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> T | Cancelled:
        """Pick exactly one of ``choices``."""
        ...

    @abstractmethod
    async def choose_many(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> list[T] | Cancelled:
        """Pick zero or more of ``choices``, returned in the order picked."""
        ...

    @abstractmethod
    async def confirm(
        self,
        message: str,
        *,
        confirm_label: str = "Yes",
        cancel_label: str = "No",
    ) -> bool:
        """Binary choice; dismissing counts as declining."""
        ...

    @abstractmethod
    def notify(self, message: str, severity: Severity = "information") -> None:
        """Show a non-blocking message to the operator."""
        ...
