"""Layout repository backed by a key-value store.

The repository exclusively owns the persisted document. Callers only see
migrated ``TerminalLayout`` values, never raw or legacy records.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import timedelta
from typing import Any

import dacite

from .exceptions import (
    LayoutNotFoundError,
    StorageReadError,
    ValidationError,
    record_error,
)
from .migration import migrate_document, migrate_record
from .models import (
    STORAGE_VERSION,
    TerminalLayout,
    layout_from_dict,
    layout_to_dict,
    utc_now,
)
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "term-layouts.layouts"

_LAYOUT_FIELDS = frozenset(f.name for f in dataclasses.fields(TerminalLayout))


class LayoutRepository:
    """CRUD access to persisted terminal layouts.

    Name uniqueness is not enforced here; callers check ``name_exists`` before
    saving or renaming.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self.store = store
        self.key = key

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_all(self) -> list[TerminalLayout]:
        """Return every stored layout, migrated to the current schema.

        Raises:
            StorageReadError: If the stored document is corrupt.
        """
        document = migrate_document(self.store.read(self.key), key=self.key)
        return [
            self._deserialize(layout_id, record)
            for layout_id, record in document["layouts"].items()
        ]

    def get(self, layout_id: str) -> TerminalLayout | None:
        """Return the layout with ``layout_id``, or None if unknown."""
        raw = self._read_raw()
        record = raw["layouts"].get(layout_id)
        if record is None:
            return None
        return self._deserialize(layout_id, migrate_record(record))

    def find_by_name(self, name: str) -> TerminalLayout | None:
        """Return the first layout whose name matches exactly."""
        for layout in self.get_all():
            if layout.name == name:
                return layout
        return None

    def resolve(self, ref: str) -> TerminalLayout | None:
        """Look a layout up by id, falling back to its name."""
        return self.get(ref) or self.find_by_name(ref)

    def name_exists(self, name: str, exclude_id: str | None = None) -> bool:
        """Check whether any layout other than ``exclude_id`` uses ``name``.

        Comparison is exact and case-sensitive.
        """
        return any(
            layout.name == name and layout.id != exclude_id for layout in self.get_all()
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def save(self, layout: TerminalLayout) -> None:
        """Insert or overwrite a layout by its id."""
        raw = self._read_raw()
        raw["layouts"][layout.id] = layout_to_dict(layout)
        self._write_raw(raw)
        logger.info("Saved layout '%s' with ID '%s'", layout.name, layout.id)

    def update(self, layout_id: str, **changes: Any) -> TerminalLayout:
        """Merge ``changes`` over an existing layout and persist it.

        ``id`` and ``created_at`` never change, even if supplied. ``updated_at``
        is always refreshed. ``groups`` replaces the whole sequence.

        Returns:
            The updated layout as stored.

        Raises:
            LayoutNotFoundError: If no layout has ``layout_id``.
            ValidationError: If ``changes`` names an unknown field or blanks the name.
        """
        raw = self._read_raw()
        record = raw["layouts"].get(layout_id)
        if record is None:
            raise LayoutNotFoundError(layout_id)

        existing = self._deserialize(layout_id, migrate_record(record))

        changes.pop("id", None)
        changes.pop("created_at", None)
        unknown = set(changes) - _LAYOUT_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown layout fields in update",
                field=", ".join(sorted(unknown)),
            )
        if "name" in changes and not str(changes["name"] or "").strip():
            raise ValidationError("Layout name cannot be empty", field="name", value=changes["name"])

        now = utc_now()
        if now <= existing.updated_at:
            now = existing.updated_at + timedelta(microseconds=1)
        changes["updated_at"] = now

        updated = dataclasses.replace(existing, **changes)
        raw["layouts"][layout_id] = layout_to_dict(updated)
        self._write_raw(raw)
        logger.info("Updated layout '%s' (%s)", layout_id, ", ".join(sorted(changes)))
        return updated

    def delete(self, layout_id: str) -> bool:
        """Remove a layout.

        Returns:
            True if the layout existed and was removed, False otherwise.
        """
        raw = self._read_raw()
        if layout_id not in raw["layouts"]:
            return False

        del raw["layouts"][layout_id]
        self._write_raw(raw)
        logger.info("Deleted layout '%s'", layout_id)
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _read_raw(self) -> dict[str, Any]:
        """Read the document without migrating its records.

        Structure is validated so that writes never clobber a corrupt store.
        """
        document = self.store.read(self.key)
        if document is None:
            return {"version": STORAGE_VERSION, "layouts": {}}

        # Raises StorageReadError for structurally invalid documents
        migrate_document(document, key=self.key)
        document.setdefault("layouts", {})
        return document

    def _write_raw(self, document: dict[str, Any]) -> None:
        document["version"] = STORAGE_VERSION
        self.store.write(self.key, document)

    def _deserialize(self, layout_id: str, record: dict[str, Any]) -> TerminalLayout:
        try:
            return layout_from_dict(record)
        except (dacite.DaciteError, ValidationError, ValueError, TypeError) as e:
            logger.error("Failed to deserialize layout %s: %s", layout_id, e)
            record_error(e)
            raise StorageReadError(
                f"Layout record is corrupt: {e}",
                key=self.key,
                context={"layout_id": layout_id},
                cause=e,
            ) from e
