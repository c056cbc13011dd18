"""Tests for the storage slot and RecordPersistence."""

import json
import logging
from pathlib import Path

import pytest

from vehicle_tariffs.exceptions import PersistenceReadError, PersistenceWriteError
from vehicle_tariffs.persistence import (
    STORAGE_KEY,
    JsonFileStorage,
    MemoryStorage,
    RecordPersistence,
)
from vehicle_tariffs.records import Record


class _FailingStorage:
    def get_item(self, key):
        raise PersistenceReadError("disk unreadable")

    def set_item(self, key, value):
        raise PersistenceWriteError("disk full")

    def remove_item(self, key):
        raise PersistenceWriteError("disk full")


@pytest.fixture
def records() -> list[Record]:
    return [
        Record("b", 1_700_000_100_000, "Fiat 500", "Molise", "0,37"),
        Record("a", 1_700_000_000_000, "Citroën Berlingo", "Valle d'Aosta", "0,53"),
    ]


# ── JsonFileStorage ──────────────────────────────────────────────────


def test_missing_file_is_empty_storage(tmp_path: Path):
    storage = JsonFileStorage(tmp_path / "storage.json")
    assert storage.get_item(STORAGE_KEY) is None


def test_set_and_get_item(tmp_path: Path):
    path = tmp_path / "nested" / "storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


def test_set_item_keeps_other_keys(tmp_path: Path):
    storage = JsonFileStorage(tmp_path / "storage.json")
    storage.set_item("one", "1")
    storage.set_item("two", "2")
    assert storage.get_item("one") == "1"
    assert storage.get_item("two") == "2"


def test_remove_item(tmp_path: Path):
    storage = JsonFileStorage(tmp_path / "storage.json")
    storage.set_item("k", "v")
    storage.remove_item("k")
    assert storage.get_item("k") is None


def test_corrupt_file_raises_read_error(tmp_path: Path):
    path = tmp_path / "storage.json"
    path.write_text("not json at all", encoding="utf-8")
    with pytest.raises(PersistenceReadError):
        JsonFileStorage(path).get_item(STORAGE_KEY)


def test_non_object_file_raises_read_error(tmp_path: Path):
    path = tmp_path / "storage.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(PersistenceReadError):
        JsonFileStorage(path).get_item(STORAGE_KEY)


def test_write_replaces_corrupt_file(tmp_path: Path):
    path = tmp_path / "storage.json"
    path.write_text("garbage", encoding="utf-8")
    storage = JsonFileStorage(path)
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"


def test_unwritable_location_raises_write_error(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    storage = JsonFileStorage(blocker / "storage.json")
    with pytest.raises(PersistenceWriteError):
        storage.set_item("k", "v")


def test_no_temp_files_left_behind(tmp_path: Path):
    storage = JsonFileStorage(tmp_path / "storage.json")
    storage.set_item("k", "v")
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]


# ── RecordPersistence ────────────────────────────────────────────────


def test_save_then_load(records: list[Record]):
    persistence = RecordPersistence(MemoryStorage())
    assert persistence.save(records) is True
    assert persistence.load() == records


def test_save_then_load_through_file(tmp_path: Path, records: list[Record]):
    path = tmp_path / "storage.json"
    RecordPersistence(JsonFileStorage(path)).save(records)
    assert RecordPersistence(JsonFileStorage(path)).load() == records


def test_save_uses_versioned_key(records: list[Record]):
    storage = MemoryStorage()
    RecordPersistence(storage).save(records)
    stored = json.loads(storage.get_item("vehapp.records.v1"))
    assert stored[0] == {
        "id": "b",
        "ts": 1_700_000_100_000,
        "vehicle": "Fiat 500",
        "region": "Molise",
        "tariff": "0,37",
    }


def test_load_missing_key_is_empty():
    assert RecordPersistence(MemoryStorage()).load() == []


@pytest.mark.parametrize("raw", ["{corrupt", "null", '{"id": "a"}', '"text"', "42"])
def test_load_bad_value_is_empty(raw: str, caplog: pytest.LogCaptureFixture):
    persistence = RecordPersistence(MemoryStorage({STORAGE_KEY: raw}))
    with caplog.at_level(logging.WARNING, logger="vehicle_tariffs.persistence"):
        assert persistence.load() == []


def test_load_skips_non_object_elements():
    raw = json.dumps([{"id": "a"}, 3, "x", None])
    records = RecordPersistence(MemoryStorage({STORAGE_KEY: raw})).load()
    assert [r.id for r in records] == ["a"]


def test_load_read_failure_is_empty(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="vehicle_tariffs.persistence"):
        assert RecordPersistence(_FailingStorage()).load() == []
    assert "disk unreadable" in caplog.text


def test_save_failure_is_logged_not_raised(
    records: list[Record], caplog: pytest.LogCaptureFixture
):
    with caplog.at_level(logging.ERROR, logger="vehicle_tariffs.persistence"):
        assert RecordPersistence(_FailingStorage()).save(records) is False
    assert "disk full" in caplog.text


def test_save_unserializable_is_logged_not_raised(caplog: pytest.LogCaptureFixture):
    rec = Record("a", 1, "v", "r", "t", extra={"bad": object()})
    with caplog.at_level(logging.ERROR, logger="vehicle_tariffs.persistence"):
        assert RecordPersistence(MemoryStorage()).save([rec]) is False
    assert "not serializable" in caplog.text
