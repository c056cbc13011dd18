"""
Durable storage for the record list.

The storage slot is a small key-value file (a JSON object of string
values), the local counterpart of a browser's localStorage. The record
list lives under one fixed, versioned key so that a future schema can
migrate or ignore older data.

Persistence is best effort: RecordPersistence never raises to its
caller. Read failures fall back to an empty list, write failures are
logged and the in-memory state stays authoritative.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from vehicle_tariffs.exceptions import PersistenceReadError, PersistenceWriteError
from vehicle_tariffs.records import Record, records_from_list

logger = logging.getLogger(__name__)

STORAGE_KEY = "vehapp.records.v1"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage slot. Nothing survives the process."""

    def __init__(self, items: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Key-value storage backed by a single JSON file.

    A missing file is an empty storage. Writes go to a temporary file in
    the same directory which then replaces the original, so a crash never
    leaves a half-written file behind.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise PersistenceReadError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(text)
        except ValueError as e:
            raise PersistenceReadError(f"Corrupt storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceReadError(f"Storage file {self.path} is not a JSON object")
        return data

    def _write_all(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceWriteError(f"Cannot write {self.path}: {e}") from e

    def _items_for_update(self) -> dict[str, str]:
        try:
            return self._read_all()
        except PersistenceReadError as e:
            logger.warning("Discarding unreadable storage file: %s", e)
            return {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if value is None or isinstance(value, str) else json.dumps(value)

    def set_item(self, key: str, value: str) -> None:
        items = self._items_for_update()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._items_for_update()
        if items.pop(key, None) is not None:
            self._write_all(items)


class RecordPersistence:
    """Serializes the record list into one storage slot and back."""

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key

    def save(self, records: list[Record]) -> bool:
        """Write the full list. Returns False (and logs) when the write failed."""
        try:
            payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
            self.storage.set_item(self.key, payload)
        except (TypeError, ValueError) as e:
            logger.error("Records not serializable under %s: %s", self.key, e)
            return False
        except PersistenceWriteError as e:
            logger.error("Saving records under %s failed: %s", self.key, e)
            return False
        return True

    def load(self) -> list[Record]:
        """Read the list back; an empty list on any failure."""
        try:
            raw = self.storage.get_item(self.key)
        except PersistenceReadError as e:
            logger.warning("Reading records under %s failed: %s", self.key, e)
            return []
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Corrupt records under %s: %s", self.key, e)
            return []
        if not isinstance(data, list):
            logger.warning(
                "Expected a list of records under %s, found %s",
                self.key,
                type(data).__name__,
            )
            return []
        return records_from_list(data, source=f"storage key {self.key}")
