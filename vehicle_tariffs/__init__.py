"""
Vehicle Tariff Register
=======================

Local register of vehicle/region records with automatic regional tariff
lookup, JSON import and export.

Modules:
    normalizer       - Region label normalization
    tariffs          - Regional tariff reference data and lookup index
    records          - Record model and the persisted record store
    persistence      - Durable key-value storage slot
    codec            - JSON import/export of records
    app              - Composition root used by user interfaces
    report_generator - Per-region summary reports
    cli              - Command-line interface
"""

__version__ = "1.0.0"

from vehicle_tariffs.app import Application
from vehicle_tariffs.config import AppConfig
from vehicle_tariffs.exceptions import ImportFormatError, LookupMiss
from vehicle_tariffs.records import Record, RecordStore
from vehicle_tariffs.tariffs import RegionEntry, TariffIndex

__all__ = [
    "Application",
    "AppConfig",
    "ImportFormatError",
    "LookupMiss",
    "Record",
    "RecordStore",
    "RegionEntry",
    "TariffIndex",
]
