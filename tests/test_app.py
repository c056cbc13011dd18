"""Tests for the Application composition root."""

import itertools
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from vehicle_tariffs.app import (
    MSG_MISSING_REGION,
    MSG_MISSING_TARIFF,
    MSG_MISSING_VEHICLE,
    Application,
)
from vehicle_tariffs.config import AppConfig
from vehicle_tariffs.exceptions import ImportFormatError, SubmissionError
from vehicle_tariffs.persistence import STORAGE_KEY, MemoryStorage

NOW = datetime(2024, 6, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "regions.json").write_text(
        json.dumps(
            [
                {"regione": "Lazio", "tariffa": "10"},
                {"regione": "lazio", "tariffa": "12"},
                {"regione": "Emilia-Romagna", "tariffa": "0,48"},
                {"regione": "Molise", "tariffa": ""},
            ]
        ),
        encoding="utf-8",
    )
    (directory / "vehicles.json").write_text(
        json.dumps(["Fiat Panda", "Iveco Daily"]), encoding="utf-8"
    )
    return directory


@pytest.fixture
def config(tmp_path: Path, data_dir: Path) -> AppConfig:
    return AppConfig(storage_path=tmp_path / "storage.json", data_dir=data_dir)


@pytest.fixture
def app(config: AppConfig) -> Application:
    ids = (f"rec-{n}" for n in itertools.count(1))
    return Application.from_config(config, id_factory=lambda: next(ids), clock=lambda: NOW)


# ── Startup ──────────────────────────────────────────────────────────


def test_reference_data_loaded(app: Application):
    assert app.vehicles == ["Fiat Panda", "Iveco Daily"]
    assert app.lookup_tariff("LAZIO ") == "12"


def test_missing_reference_data_degrades(tmp_path: Path):
    config = AppConfig(storage_path=tmp_path / "s.json", data_dir=tmp_path / "nowhere")
    app = Application.from_config(config)
    assert app.vehicles == []
    assert app.lookup_tariff("Lazio") is None
    assert app.validate_submission("Fiat Panda", "Lazio") == MSG_MISSING_TARIFF


def test_null_reference_tariff_is_unavailable(tmp_path: Path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "regions.json").write_text(
        json.dumps([{"regione": "Lazio", "tariffa": None}]), encoding="utf-8"
    )
    app = Application.from_config(AppConfig(storage_path=tmp_path / "s.json", data_dir=data_dir))
    assert app.lookup_tariff("Lazio") is None
    assert app.validate_submission("Fiat Panda", "Lazio") == MSG_MISSING_TARIFF


def test_bundled_reference_data(tmp_path: Path):
    app = Application.from_config(AppConfig(storage_path=tmp_path / "s.json"))
    assert app.lookup_tariff("valle d'aosta") == "0,53"


def test_corrupt_storage_starts_empty(config: AppConfig):
    config.storage_path.write_text("{{{", encoding="utf-8")
    app = Application.from_config(config)
    assert app.store.snapshot() == []


def test_records_survive_restart(app: Application, config: AppConfig):
    rec = app.submit("Fiat Panda", "lazio")
    again = Application.from_config(config)
    assert again.store.snapshot() == [rec]


def test_injected_storage_is_used(config: AppConfig):
    storage = MemoryStorage()
    app = Application.from_config(config, storage=storage)
    app.submit("Fiat Panda", "Lazio")
    assert storage.get_item(STORAGE_KEY) is not None
    assert not config.storage_path.exists()


# ── Submission ───────────────────────────────────────────────────────


def test_submit_resolves_tariff_and_label(app: Application):
    rec = app.submit("  Fiat Panda ", "emilia-romagna")
    assert rec.vehicle == "Fiat Panda"
    assert rec.region == "Emilia-Romagna"
    assert rec.tariff == "0,48"
    assert rec.id == "rec-1"
    assert rec.created_at == NOW


@pytest.mark.parametrize(
    "vehicle, region, message",
    [
        ("", "Lazio", MSG_MISSING_VEHICLE),
        ("   ", "Lazio", MSG_MISSING_VEHICLE),
        (None, "Lazio", MSG_MISSING_VEHICLE),
        ("Fiat Panda", "", MSG_MISSING_REGION),
        ("Fiat Panda", None, MSG_MISSING_REGION),
        ("Fiat Panda", "Atlantide", MSG_MISSING_TARIFF),
        ("Fiat Panda", "Molise", MSG_MISSING_TARIFF),
    ],
)
def test_submit_presence_checks(app: Application, vehicle, region, message):
    assert app.validate_submission(vehicle, region) == message
    with pytest.raises(SubmissionError, match=message):
        app.submit(vehicle, region)
    assert app.store.snapshot() == []


def test_tariff_fixed_at_creation(app: Application, config: AppConfig, data_dir: Path):
    app.submit("Fiat Panda", "Lazio")
    (data_dir / "regions.json").write_text(
        json.dumps([{"regione": "Lazio", "tariffa": "99"}]), encoding="utf-8"
    )
    reloaded = Application.from_config(config)
    assert reloaded.lookup_tariff("Lazio") == "99"
    assert reloaded.store.snapshot()[0].tariff == "12"


# ── Delete / clear ───────────────────────────────────────────────────


def test_delete_and_clear(app: Application):
    first = app.submit("Fiat Panda", "Lazio")
    app.submit("Iveco Daily", "Lazio")
    assert app.delete(first.id) is True
    assert app.delete(first.id) is False
    assert len(app.store) == 1
    app.clear()
    assert len(app.store) == 0


# ── Import / export ──────────────────────────────────────────────────


def test_export_then_import_prepends(app: Application):
    app.submit("Fiat Panda", "Lazio")
    exported = app.export()
    app.submit("Iveco Daily", "Lazio")
    before = app.store.snapshot()

    imported = app.import_data(exported)

    assert app.store.snapshot() == imported + before
    assert len(app.store) == 3


def test_import_invalid_document(app: Application):
    app.submit("Fiat Panda", "Lazio")
    with pytest.raises(ImportFormatError):
        app.import_data(b'{"not": "a list"}')
    assert len(app.store) == 1


def test_import_file(app: Application, tmp_path: Path):
    path = tmp_path / "in.json"
    path.write_text(json.dumps([{"id": "x", "ts": 0, "vehicle": "v", "region": "r", "tariff": "t"}]))
    app.import_file(path)
    assert app.store.snapshot()[0].id == "x"
