"""
Regional tariff reference data and lookup index.

Reference data is a JSON list of ``{"regione": ..., "tariffa": ...}``
objects shipped with the package (``vehicle_tariffs/data/regions.json``)
or read from a configured data directory. The vehicle suggestion list
lives next to it in ``vehicles.json``.

A missing or malformed reference file never stops the application: it
degrades to an empty list, and every lookup against the resulting empty
index reports no tariff.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from vehicle_tariffs.exceptions import LookupMiss
from vehicle_tariffs.normalizer import normalize

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent / "data"
REGIONS_FILENAME = "regions.json"
VEHICLES_FILENAME = "vehicles.json"


@dataclass(frozen=True)
class RegionEntry:
    """A region label and its tariff, as published in the reference data."""

    region: str
    tariff: str

    @classmethod
    def from_dict(cls, data: dict) -> "RegionEntry":
        region, tariff = data["regione"], data["tariffa"]
        if region is None or tariff is None:
            raise TypeError("regione and tariffa must not be null")
        return cls(region=str(region), tariff=str(tariff))


class TariffIndex:
    """
    Mapping from normalized region key to tariff.

    Built once from the reference entries. When two entries normalize to
    the same key the later one wins.
    """

    def __init__(self, entries: Iterable[RegionEntry] = ()) -> None:
        self._tariffs: dict[str, str] = {}
        self._labels: dict[str, str] = {}
        for entry in entries:
            self._add(entry)

    def _add(self, entry: RegionEntry) -> None:
        key = normalize(entry.region)
        previous = self._tariffs.get(key)
        if previous is not None:
            logger.warning(
                "Region %r overrides tariff %r of %r with %r",
                entry.region,
                previous,
                self._labels[key],
                entry.tariff,
            )
        self._tariffs[key] = entry.tariff
        self._labels[key] = entry.region

    def __len__(self) -> int:
        return len(self._tariffs)

    def __contains__(self, label: object) -> bool:
        return normalize(label) in self._tariffs

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels.values())

    @property
    def regions(self) -> list[str]:
        """Display labels in load order, one per distinct key."""
        return list(self._labels.values())

    def label_for(self, label: Optional[str]) -> Optional[str]:
        """Display label of the region matching this label, or None."""
        return self._labels.get(normalize(label))

    def lookup(self, label: Optional[str]) -> Optional[str]:
        """Return the tariff for a region label, or None when unknown."""
        return self._tariffs.get(normalize(label))

    def get_tariff(self, label: str) -> str:
        """Return the tariff for a region label, raising LookupMiss when unknown."""
        tariff = self.lookup(label)
        if tariff is None:
            raise LookupMiss(label)
        return tariff


def build(entries: Iterable[RegionEntry]) -> TariffIndex:
    """Build a tariff index from entries in load order."""
    return TariffIndex(entries)


def lookup(index: TariffIndex, label: Optional[str]) -> Optional[str]:
    """Look up a region label in an index; None means no tariff."""
    return index.lookup(label)


# ---------------------------------------------------------------------------
# Reference data loading
# ---------------------------------------------------------------------------


def _read_json_list(path: Path) -> list:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Reference data %s unavailable: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Reference data %s is not a JSON list", path)
        return []
    return data


def load_region_entries(path: Path | str) -> list[RegionEntry]:
    """Read region entries from a JSON file, skipping malformed items."""
    entries: list[RegionEntry] = []
    for i, item in enumerate(_read_json_list(Path(path))):
        try:
            entries.append(RegionEntry.from_dict(item))
        except (KeyError, TypeError) as e:
            logger.warning("Skipping region entry %d in %s: %s", i + 1, path, e)
    return entries


def load_vehicles(path: Path | str) -> list[str]:
    """Read the vehicle suggestion list from a JSON file."""
    return [str(v) for v in _read_json_list(Path(path)) if v is not None]
