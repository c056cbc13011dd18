"""
Composition root.

Application owns the tariff index, the record store and the vehicle
suggestion list for one session. User interfaces talk to it instead of
building those pieces themselves, and re-render from
``store.snapshot()`` after each call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from vehicle_tariffs.codec import export_all, import_from_file, parse_import
from vehicle_tariffs.config import AppConfig
from vehicle_tariffs.exceptions import SubmissionError
from vehicle_tariffs.persistence import JsonFileStorage, KeyValueStorage, RecordPersistence
from vehicle_tariffs.records import Record, RecordStore, new_record_id
from vehicle_tariffs.tariffs import TariffIndex, load_region_entries, load_vehicles

logger = logging.getLogger(__name__)

MSG_MISSING_VEHICLE = "Inserisci il veicolo."
MSG_MISSING_REGION = "Seleziona la regione."
MSG_MISSING_TARIFF = "Tariffa non disponibile per la regione."


class Application:
    """A session: reference data plus the persisted record list."""

    def __init__(
        self,
        tariffs: TariffIndex,
        store: RecordStore,
        vehicles: Iterable[str] = (),
    ) -> None:
        self.tariffs = tariffs
        self.store = store
        self.vehicles = list(vehicles)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        storage: Optional[KeyValueStorage] = None,
        id_factory: Callable[[], str] = new_record_id,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "Application":
        """Load reference data and persisted records, then wire everything up."""
        vehicles = load_vehicles(config.vehicles_path)
        tariffs = TariffIndex(load_region_entries(config.regions_path))
        if not len(tariffs):
            logger.warning(
                "No regional tariffs loaded from %s; tariffs will be unavailable",
                config.regions_path,
            )

        if storage is None:
            storage = JsonFileStorage(config.storage_path)
        persistence = RecordPersistence(storage)
        store = RecordStore(persistence, id_factory=id_factory, clock=clock)
        store.load()
        return cls(tariffs, store, vehicles)

    # ------------------------------------------------------------------
    # Form actions
    # ------------------------------------------------------------------

    def lookup_tariff(self, region: Optional[str]) -> Optional[str]:
        return self.tariffs.lookup(region)

    def validate_submission(self, vehicle: Optional[str], region: Optional[str]) -> str:
        """Return the first presence-check message, or "" when the submission is complete."""
        if not (vehicle or "").strip():
            return MSG_MISSING_VEHICLE
        if not (region or "").strip():
            return MSG_MISSING_REGION
        if not self.lookup_tariff(region):
            return MSG_MISSING_TARIFF
        return ""

    def submit(self, vehicle: Optional[str], region: Optional[str]) -> Record:
        """Validate and store a new record. Raises SubmissionError on missing data."""
        error = self.validate_submission(vehicle, region)
        if error:
            raise SubmissionError(error)

        label = self.tariffs.label_for(region) or region.strip()
        return self.store.insert(vehicle.strip(), label, self.lookup_tariff(region))

    def delete(self, record_id: str) -> bool:
        return self.store.delete_by_id(record_id)

    def clear(self) -> None:
        self.store.clear_all()

    # ------------------------------------------------------------------
    # File actions
    # ------------------------------------------------------------------

    def export(self) -> bytes:
        return export_all(self.store.snapshot())

    def import_data(self, data: bytes | str) -> list[Record]:
        """Parse an import document and merge it ahead of the current records."""
        return self.store.merge_imported(parse_import(data))

    def import_file(self, path: Path | str) -> list[Record]:
        return self.store.merge_imported(import_from_file(path))
