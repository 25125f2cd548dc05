"""Key-value persistence backends for the layout document.

Stores hold whole JSON documents under string keys. There is no partial update
primitive: every write replaces the document, last write wins. File writes go
through a temporary file in the same directory, so a failed write leaves the
previous document intact.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import abstractmethod
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .exceptions import StorageReadError, StorageWriteError, record_error

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for whole-document key-value persistence."""

    @abstractmethod
    def read(self, key: str) -> Any | None:
        """Return the document stored under ``key``, or None if absent.

        Raises:
            StorageReadError: If the stored value cannot be read or parsed.
        """
        ...

    @abstractmethod
    def write(self, key: str, document: Any) -> None:
        """Replace the document stored under ``key``.

        Raises:
            StorageWriteError: If the document cannot be written.
        """
        ...


class JsonFileStore:
    """Stores each key as a JSON file inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self.directory / f"{safe_key}.json"

    def read(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            logger.debug("No stored document for %s at %s", key, path)
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            logger.debug("Loaded %s from %s", key, path)
            return data
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            record_error(e)
            raise StorageReadError(
                f"Invalid JSON in layout storage at line {e.lineno}",
                key=key,
                file_path=str(path),
                context={"line": e.lineno, "column": e.colno},
                cause=e,
            ) from e
        except OSError as e:
            logger.error("Failed to read %s: %s", path, e)
            record_error(e)
            raise StorageReadError(
                "Failed to read layout storage",
                key=key,
                file_path=str(path),
                cause=e,
            ) from e

    def write(self, key: str, document: Any) -> None:
        path = self.path_for(key)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(document, indent=2)
        except OSError as e:
            logger.error("Failed to create storage directory: %s", e)
            record_error(e)
            raise StorageWriteError(
                f"Failed to create storage directory: {self.directory}",
                key=key,
                file_path=str(self.directory),
                cause=e,
            ) from e
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize %s to JSON: %s", key, e)
            record_error(e)
            raise StorageWriteError(
                "Failed to serialize layout storage to JSON",
                key=key,
                file_path=str(path),
                cause=e,
            ) from e

        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                f.write(payload)
            os.replace(tmp_path, path)
            logger.debug("Saved %s to %s", key, path)
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            record_error(e)
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageWriteError(
                "Failed to write layout storage",
                key=key,
                file_path=str(path),
                cause=e,
            ) from e


class MemoryStore:
    """In-memory store; documents are copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.write_count = 0

    def read(self, key: str) -> Any | None:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def write(self, key: str, document: Any) -> None:
        self._data[key] = copy.deepcopy(document)
        self.write_count += 1

    def raw(self, key: str) -> Any | None:
        """Return the stored document without copying (for inspection)."""
        return self._data.get(key)
