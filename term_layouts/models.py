"""Core dataclasses for terminal layouts and application configuration.

All models are designed for JSON serialization using dacite. Python attributes
are snake_case; the persisted layout document keeps its camelCase keys
(``profileName``, ``createdAt``, ``updatedAt``), translated by the wire helpers
at the bottom of this module.
"""

from __future__ import annotations

import secrets
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import dacite

from .exceptions import ValidationError

STORAGE_VERSION = "2.0.0"


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_layout_id() -> str:
    """Generate an opaque layout identifier (32 hex chars)."""
    return secrets.token_hex(16)


def _normalize_name(value: str, field_name: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{field_name} cannot be empty", field=field_name, value=value)
    return name


# =============================================================================
# Layout Models
# =============================================================================


@dataclass
class TerminalSpec:
    """One terminal's intended configuration."""

    name: str  # Display label
    cwd: str | None = None  # Working directory, relative to the workspace root
    command: str | None = None  # Sent after the terminal is created
    env: dict[str, str] | None = None  # Extra environment variables
    icon: str | None = None  # Opaque theming hint
    color: str | None = None  # Opaque theming hint
    profile_name: str | None = None  # Host-defined terminal profile

    def __post_init__(self) -> None:
        self.name = _normalize_name(self.name, "terminal name")


@dataclass
class TerminalGroup:
    """Terminals rendered together as adjacent splits.

    The first terminal is the group's root; later ones split off it in order.
    """

    id: int
    terminals: list[TerminalSpec] = field(default_factory=list)

    @property
    def terminal_count(self) -> int:
        return len(self.terminals)


@dataclass
class TerminalLayout:
    """A named, persisted arrangement of terminal groups."""

    id: str  # Immutable once created
    name: str  # Unique among layouts (enforced by callers)
    groups: list[TerminalGroup]
    created_at: datetime
    updated_at: datetime
    description: str | None = None

    def __post_init__(self) -> None:
        self.name = _normalize_name(self.name, "layout name")
        self.created_at = _as_utc(self.created_at)
        self.updated_at = _as_utc(self.updated_at)

    @classmethod
    def create(
        cls,
        name: str,
        groups: list[TerminalGroup],
        description: str | None = None,
    ) -> TerminalLayout:
        """Build a new layout with a fresh id and matching timestamps."""
        now = utc_now()
        return cls(
            id=generate_layout_id(),
            name=name,
            groups=list(groups),
            created_at=now,
            updated_at=now,
            description=description,
        )

    @property
    def terminal_count(self) -> int:
        return sum(group.terminal_count for group in self.groups)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    @property
    def summary(self) -> str:
        """Short description such as "3 terminal(s) in 2 groups"."""
        groups_info = "1 group" if self.group_count == 1 else f"{self.group_count} groups"
        return f"{self.terminal_count} terminal(s) in {groups_info}"


@dataclass
class LayoutStore:
    """Root persisted object holding every layout by id."""

    version: str = STORAGE_VERSION
    layouts: dict[str, TerminalLayout] = field(default_factory=dict)


# =============================================================================
# App Configuration
# =============================================================================


@dataclass
class AppSettings:
    """Global application settings."""

    store_dir: str | None = None  # Defaults to the config directory
    workspace_root: str | None = None  # Base for relative working directories
    split_vertical: bool = True  # Side-by-side splits
    settle_timeout_seconds: float = 3.0
    settle_initial_delay_seconds: float = 0.05
    command_delay_seconds: float = 0.3
    confirm_close_existing: bool = True


@dataclass
class AppConfig:
    """Complete application configuration."""

    settings: AppSettings = field(default_factory=AppSettings)


# =============================================================================
# Serialization Helpers
# =============================================================================

_DACITE_CONFIG = dacite.Config(
    cast=[Enum, float],
    type_hooks={datetime: lambda value: parse_timestamp(value)},
)

# Python attribute -> persisted key
_TERMINAL_WIRE_KEYS = {"profile_name": "profileName"}
_LAYOUT_WIRE_KEYS = {"created_at": "createdAt", "updated_at": "updatedAt"}


def parse_timestamp(value: Any) -> datetime:
    """Parse a persisted ISO-8601 timestamp.

    Accepts the trailing ``Z`` written by JavaScript ``toISOString()``; naive
    values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    return _as_utc(parsed)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp for persistence without losing precision."""
    return value.isoformat()


def terminal_to_dict(spec: TerminalSpec) -> dict[str, Any]:
    """Serialize a TerminalSpec, omitting unset optional fields."""
    data: dict[str, Any] = {}
    for key, value in asdict(spec).items():
        if value is None:
            continue
        data[_TERMINAL_WIRE_KEYS.get(key, key)] = value
    return data


def _terminal_fields(data: dict[str, Any]) -> dict[str, Any]:
    wire_to_attr = {wire: attr for attr, wire in _TERMINAL_WIRE_KEYS.items()}
    return {wire_to_attr.get(key, key): value for key, value in data.items()}


def terminal_from_dict(data: dict[str, Any]) -> TerminalSpec:
    """Load a TerminalSpec from its persisted form."""
    return dacite.from_dict(
        data_class=TerminalSpec,
        data=_terminal_fields(data),
        config=_DACITE_CONFIG,
    )


def group_to_dict(group: TerminalGroup) -> dict[str, Any]:
    return {
        "id": group.id,
        "terminals": [terminal_to_dict(spec) for spec in group.terminals],
    }


def layout_to_dict(layout: TerminalLayout) -> dict[str, Any]:
    """Serialize a layout into the persisted record shape."""
    data: dict[str, Any] = {
        "id": layout.id,
        "name": layout.name,
    }
    if layout.description is not None:
        data["description"] = layout.description
    data["groups"] = [group_to_dict(group) for group in layout.groups]
    data["createdAt"] = format_timestamp(layout.created_at)
    data["updatedAt"] = format_timestamp(layout.updated_at)
    return data


def layout_from_dict(record: dict[str, Any]) -> TerminalLayout:
    """Load a layout from a record already migrated to the grouped shape.

    Raises:
        dacite.DaciteError: If required fields are missing or mistyped.
        ValidationError: If a name is blank.
        ValueError: If a timestamp cannot be parsed.
    """
    data: dict[str, Any] = {}
    for key, value in record.items():
        if key in ("createdAt", "updatedAt"):
            continue
        data[key] = value
    for attr, wire in _LAYOUT_WIRE_KEYS.items():
        if wire in record:
            data[attr] = record[wire]

    if isinstance(data.get("groups"), list):
        data["groups"] = [
            {
                **group,
                "terminals": [
                    _terminal_fields(spec) if isinstance(spec, dict) else spec
                    for spec in group.get("terminals", [])
                ],
            }
            if isinstance(group, dict)
            else group
            for group in data["groups"]
        ]

    return dacite.from_dict(
        data_class=TerminalLayout,
        data=data,
        config=_DACITE_CONFIG,
    )


def store_to_dict(store: LayoutStore) -> dict[str, Any]:
    """Serialize a LayoutStore into the persisted document."""
    return {
        "version": store.version,
        "layouts": {
            layout_id: layout_to_dict(layout) for layout_id, layout in store.layouts.items()
        },
    }


def _convert_enums(obj: object) -> object:
    """Recursively convert Enum values to their string values."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _convert_enums(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_enums(item) for item in obj]
    return obj


def model_to_dict(obj: object) -> dict:
    """Convert a dataclass model to a dictionary for JSON serialization."""
    data = asdict(obj)  # type: ignore[arg-type]
    return _convert_enums(data)  # type: ignore[return-value]


def model_from_dict(data_class: type, data: dict) -> object:
    """Load a dataclass model from a dictionary."""
    return dacite.from_dict(
        data_class=data_class,
        data=data,
        config=_DACITE_CONFIG,
    )
