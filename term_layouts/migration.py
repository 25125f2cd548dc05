"""Schema migration for persisted layout documents.

Layouts written before terminal grouping existed carry a flat ``terminals``
list instead of ``groups``. Records are upgraded in memory on every read; the
upgraded shape is only persisted when a caller saves or updates that record.
"""

from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any

from .exceptions import StorageReadError
from .models import STORAGE_VERSION

logger = logging.getLogger(__name__)

LEGACY_STORAGE_VERSION = "1.0.0"


class RecordSchema(Enum):
    """Shape of a single persisted layout record."""

    FLAT = "flat"  # Pre-grouping: top-level "terminals" list
    GROUPED = "grouped"  # Current: "groups" of terminals


def detect_schema(record: dict[str, Any]) -> RecordSchema:
    """Classify a record: legacy iff it has ``terminals`` and lacks ``groups``."""
    if "terminals" in record and "groups" not in record:
        return RecordSchema.FLAT
    return RecordSchema.GROUPED


def _upgrade_flat(record: dict[str, Any]) -> dict[str, Any]:
    upgraded = {key: value for key, value in record.items() if key != "terminals"}
    upgraded["groups"] = [{"id": 0, "terminals": list(record["terminals"] or [])}]
    return upgraded


_UPGRADERS = {
    RecordSchema.FLAT: _upgrade_flat,
}


def migrate_record(record: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``record`` in the current grouped shape."""
    record = copy.deepcopy(record)
    schema = detect_schema(record)
    upgrader = _UPGRADERS.get(schema)
    if upgrader is None:
        return record

    logger.debug("Migrating %s layout record %s", schema.value, record.get("id"))
    return upgrader(record)


def migrate_document(document: Any, *, key: str | None = None) -> dict[str, Any]:
    """Migrate a whole persisted document to the current version.

    Args:
        document: The raw stored value, or None when nothing is stored yet.
        key: Storage key, used for error context only.

    Returns:
        A new document with the current version and every record migrated.

    Raises:
        StorageReadError: If the document does not have the expected structure.
    """
    if document is None:
        return {"version": STORAGE_VERSION, "layouts": {}}

    if not isinstance(document, dict):
        raise StorageReadError(
            "Layout storage is corrupt: expected an object",
            key=key,
            context={"found": type(document).__name__},
        )

    layouts = document.get("layouts", {})
    if not isinstance(layouts, dict):
        raise StorageReadError(
            "Layout storage is corrupt: 'layouts' must be an object",
            key=key,
            context={"found": type(layouts).__name__},
        )

    version = document.get("version") or LEGACY_STORAGE_VERSION
    if version != STORAGE_VERSION:
        logger.debug("Reading layout storage version %s as %s", version, STORAGE_VERSION)

    migrated: dict[str, Any] = {}
    for layout_id, record in layouts.items():
        if not isinstance(record, dict):
            raise StorageReadError(
                "Layout storage is corrupt: layout record must be an object",
                key=key,
                context={"layout_id": layout_id},
            )
        migrated[layout_id] = migrate_record(record)

    return {"version": STORAGE_VERSION, "layouts": migrated}
