"""Exception hierarchy for vehicle_tariffs."""

from __future__ import annotations


class VehicleTariffsError(Exception):
    """Base exception for all vehicle_tariffs errors."""


class LookupMiss(VehicleTariffsError, KeyError):
    """Region label has no tariff in the index."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(label)

    def __str__(self) -> str:
        return f"No tariff for region: {self.label!r}"


class ImportFormatError(VehicleTariffsError, ValueError):
    """Imported JSON document is not a list of records."""


class PersistenceError(VehicleTariffsError):
    """Durable storage slot could not be used."""


class PersistenceReadError(PersistenceError):
    """Storage slot is unreadable or holds corrupt data."""


class PersistenceWriteError(PersistenceError):
    """Storage slot could not be written."""


class SubmissionError(VehicleTariffsError, ValueError):
    """A record submission failed presence validation."""
