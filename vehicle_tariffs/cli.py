"""
Command-line interface for the vehicle tariff register.

Each subcommand loads the session, performs one action against the
record store and re-renders from its snapshot.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from vehicle_tariffs.app import Application
from vehicle_tariffs.codec import export_to_file
from vehicle_tariffs.config import AppConfig
from vehicle_tariffs.exceptions import ImportFormatError, SubmissionError
from vehicle_tariffs.records import Record
from vehicle_tariffs.report_generator import ReportGenerator

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fmt_date(created_at: Optional[datetime]) -> str:
    if created_at is None:
        return "-"
    return created_at.astimezone().strftime("%d/%m/%Y %H:%M")


def _config(args: argparse.Namespace) -> AppConfig:
    return AppConfig.from_env(storage_path=args.storage, data_dir=args.data_dir)


def _load_app(args: argparse.Namespace) -> Application:
    return Application.from_config(_config(args))


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def render_records(records: list[Record]) -> None:
    """Print the record table, newest first."""
    if not records:
        console.print("[dim]Nessun record ancora. Aggiungine uno con 'add'.[/dim]")
        return

    table = Table(title="Record", box=box.ROUNDED)
    table.add_column("Data")
    table.add_column("Veicolo", style="bold")
    table.add_column("Regione")
    table.add_column("Tariffa", justify="right")
    table.add_column("ID", style="dim")

    for rec in records:
        table.add_row(
            _fmt_date(rec.created_at),
            escape(str(rec.vehicle)),
            escape(str(rec.region)),
            escape(str(rec.tariff)),
            escape(str(rec.id)),
        )
    console.print(table)


# -----------------------------------------------------------------------
# Reference data
# -----------------------------------------------------------------------


def cmd_vehicles(args: argparse.Namespace) -> None:
    """List vehicle suggestions."""
    app = _load_app(args)
    if not app.vehicles:
        console.print("[yellow]Nessun veicolo disponibile.[/yellow]")
        return
    for vehicle in app.vehicles:
        console.print(escape(vehicle))


def cmd_regions(args: argparse.Namespace) -> None:
    """List regions with their tariffs."""
    app = _load_app(args)
    if not len(app.tariffs):
        console.print("[yellow]Nessuna regione disponibile.[/yellow]")
        return

    table = Table(title="Tariffe regionali", box=box.SIMPLE)
    table.add_column("Regione")
    table.add_column("Tariffa", justify="right")
    for region in app.tariffs.regions:
        table.add_row(escape(region), escape(app.tariffs.lookup(region) or ""))
    console.print(table)


def cmd_lookup(args: argparse.Namespace) -> None:
    """Show the tariff for a region."""
    app = _load_app(args)
    tariff = app.lookup_tariff(args.region)
    if tariff is None:
        _fail(f"Tariffa non disponibile per la regione: {args.region}")
    console.print(
        Panel(
            f"[bold]Regione:[/bold] {app.tariffs.label_for(args.region)}\n"
            f"[bold]Tariffa:[/bold] {tariff}",
            title="Tariffa",
            border_style="cyan",
        )
    )


# -----------------------------------------------------------------------
# Record actions
# -----------------------------------------------------------------------


def cmd_add(args: argparse.Namespace) -> None:
    """Add a record for a vehicle and region."""
    app = _load_app(args)
    try:
        app.submit(args.vehicle, args.region)
    except SubmissionError as e:
        _fail(str(e))
    console.print("[green]Record aggiunto[/green]")
    render_records(app.store.snapshot())


def cmd_list(args: argparse.Namespace) -> None:
    """Show all records."""
    app = _load_app(args)
    render_records(app.store.snapshot())


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a record by id."""
    app = _load_app(args)
    if app.delete(args.id):
        console.print("[green]Record eliminato[/green]")
    else:
        console.print(f"[yellow]Nessun record con id {args.id}[/yellow]")
    render_records(app.store.snapshot())


def cmd_clear(args: argparse.Namespace) -> None:
    """Delete every record after confirmation."""
    app = _load_app(args)
    if not args.yes and not Confirm.ask(
        "Vuoi davvero eliminare tutti i record?", console=console, default=False
    ):
        return
    app.clear()
    console.print("[green]Archivio svuotato[/green]")


# -----------------------------------------------------------------------
# Import / export
# -----------------------------------------------------------------------


def cmd_export(args: argparse.Namespace) -> None:
    """Export all records to a JSON file."""
    config = _config(args)
    app = Application.from_config(config)
    path = Path(args.file or config.export_filename)
    try:
        export_to_file(app.store.snapshot(), path)
    except OSError as e:
        _fail(f"Export fallito: {e}")
    console.print(f"[green]Esportati {len(app.store)} record in {path}[/green]")


def cmd_import(args: argparse.Namespace) -> None:
    """Import records from a JSON file, ahead of the existing ones."""
    app = _load_app(args)
    try:
        imported = app.import_file(args.file)
    except ImportFormatError as e:
        _fail(f"Import fallito: {e}")
    console.print(f"[green]Import completato: {len(imported)} record[/green]")
    render_records(app.store.snapshot())


def cmd_summary(args: argparse.Namespace) -> None:
    """Summarize records per region."""
    app = _load_app(args)
    rg = ReportGenerator(args.output_dir)
    report = rg.region_report(app.store.snapshot())
    console.print(rg.format_text(report))

    if args.export_json:
        rg.to_json(report, args.export_json)
        console.print(f"[green]JSON exported to {rg.output_dir / args.export_json}[/green]")
    if args.export_csv:
        rg.to_csv(report, args.export_csv)
        console.print(f"[green]CSV exported to {rg.output_dir / args.export_csv}[/green]")


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vehapp",
        description="Gestione veicoli e tariffe regionali - local record register with tariff lookup",
    )
    parser.add_argument("--storage", help="Storage file (default: ~/.vehapp/storage.json)")
    parser.add_argument("--data-dir", help="Directory with regions.json and vehicles.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    vehicles_p = subparsers.add_parser("vehicles", help="List vehicle suggestions")
    vehicles_p.set_defaults(func=cmd_vehicles)

    regions_p = subparsers.add_parser("regions", help="List regions and tariffs")
    regions_p.set_defaults(func=cmd_regions)

    lookup_p = subparsers.add_parser("lookup", help="Look up the tariff of a region")
    lookup_p.add_argument("region", help="Region name (case and accents ignored)")
    lookup_p.set_defaults(func=cmd_lookup)

    add_p = subparsers.add_parser("add", help="Add a record")
    add_p.add_argument("--vehicle", required=True, help="Vehicle (free text)")
    add_p.add_argument("--region", required=True, help="Region name")
    add_p.set_defaults(func=cmd_add)

    list_p = subparsers.add_parser("list", help="Show all records")
    list_p.set_defaults(func=cmd_list)

    delete_p = subparsers.add_parser("delete", help="Delete a record")
    delete_p.add_argument("id", help="Record id")
    delete_p.set_defaults(func=cmd_delete)

    clear_p = subparsers.add_parser("clear", help="Delete all records")
    clear_p.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    clear_p.set_defaults(func=cmd_clear)

    export_p = subparsers.add_parser("export", help="Export records to JSON")
    export_p.add_argument("file", nargs="?", help="Output file (default: records.json)")
    export_p.set_defaults(func=cmd_export)

    import_p = subparsers.add_parser("import", help="Import records from JSON")
    import_p.add_argument("file", help="JSON file with a list of records")
    import_p.set_defaults(func=cmd_import)

    summary_p = subparsers.add_parser("summary", help="Records per region")
    summary_p.add_argument("--export-json", help="Export report to JSON file")
    summary_p.add_argument("--export-csv", help="Export region breakdown to CSV file")
    summary_p.add_argument("--output-dir", help="Output directory for exports")
    summary_p.set_defaults(func=cmd_summary)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args.verbose)
    args.func(args)
