#!/usr/bin/env python3
"""
Vehicle Tariff Register - Entry Point

Keeps a local list of vehicle/region records, filling in each region's
tariff automatically, with JSON import and export.

Usage:
    python main.py regions
    python main.py lookup "emilia romagna"
    python main.py add --vehicle "Fiat Panda" --region Lazio
    python main.py list
    python main.py delete <record-id>
    python main.py clear --yes
    python main.py export records.json
    python main.py import records.json
    python main.py summary --export-csv summary.csv
"""

from vehicle_tariffs.cli import main

if __name__ == "__main__":
    main()
