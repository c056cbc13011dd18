#!/usr/bin/env python3
"""
Quick Start Example
===================

Demonstrates basic usage of the record register: look up a regional
tariff, add a couple of records, export them and import them back.
Records are kept in memory only.

Usage:
    python examples/quick_start.py
"""

from vehicle_tariffs.app import Application
from vehicle_tariffs.config import AppConfig
from vehicle_tariffs.persistence import MemoryStorage


def main() -> None:
    # Bundled reference data, storage that lives only in this process
    app = Application.from_config(AppConfig(), storage=MemoryStorage())

    # Region names match regardless of case, accents and spacing
    print(f"Tariff for '  EMILIA-romagna ': {app.lookup_tariff('  EMILIA-romagna ')}")
    print(f"Tariff for 'Atlantide':         {app.lookup_tariff('Atlantide')}")

    app.submit("Fiat Panda", "lazio")
    app.submit("Iveco Daily", "Valle d'Aosta")

    print("\n--- Records (newest first) ---")
    for rec in app.store.snapshot():
        print(f"{rec.created_at:%d/%m/%Y %H:%M}  {rec.vehicle:<14} {rec.region:<16} {rec.tariff}")

    # Export, then import the same document: imported records go first
    exported = app.export()
    app.import_data(exported)
    print(f"\nAfter re-import: {len(app.store)} records")


if __name__ == "__main__":
    main()
