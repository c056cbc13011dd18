"""
Per-region summary of the record list.

Produces:
- Record counts per region, with the latest tariff recorded
- First and last record time per region
- Text, CSV and JSON output
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd

from vehicle_tariffs.normalizer import normalize
from vehicle_tariffs.records import Record, from_millis


@dataclass
class RegionSummary:
    """Aggregate figures for one region."""

    region: str
    records: int
    latest_tariff: Optional[str]
    first_record: Optional[datetime]
    last_record: Optional[datetime]


def _frame(records: Iterable[Record]) -> pd.DataFrame:
    rows = [
        {
            "key": normalize(r.region),
            "region": "" if r.region is None else str(r.region),
            "tariff": r.tariff,
            "ts": r.ts,
        }
        for r in records
    ]
    frame = pd.DataFrame(rows, columns=["key", "region", "tariff", "ts"])
    frame["ts"] = pd.to_numeric(frame["ts"], errors="coerce")
    return frame


def _to_datetime(value: Any) -> Optional[datetime]:
    if pd.isna(value):
        return None
    return from_millis(int(value))


def summarize_by_region(records: Iterable[Record]) -> list[RegionSummary]:
    """
    Group records by normalized region label.

    Regions are ordered by record count (highest first), then by label.
    The label and tariff shown for a region are those of its most recent
    record.
    """
    frame = _frame(records)
    if frame.empty:
        return []

    ordered = frame.sort_values("ts", kind="stable", na_position="first")
    grouped = ordered.groupby("key", sort=False)
    stats = grouped.agg(
        records=("key", "size"),
        first_ts=("ts", "min"),
        last_ts=("ts", "max"),
    )
    # last row per group, nulls included
    latest = grouped.tail(1).set_index("key")[["region", "tariff"]]
    stats = stats.join(latest)

    summaries = [
        RegionSummary(
            region=row.region,
            records=int(row.records),
            latest_tariff=None if pd.isna(row.tariff) else str(row.tariff),
            first_record=_to_datetime(row.first_ts),
            last_record=_to_datetime(row.last_ts),
        )
        for row in stats.itertuples()
    ]
    summaries.sort(key=lambda s: (-s.records, s.region))
    return summaries


class ReportGenerator:
    """
    Builds the region summary report and renders it.

    Reports are plain dicts so they can be printed, dumped to JSON or
    flattened into CSV rows.
    """

    def __init__(self, output_dir: Optional[str | Path] = None) -> None:
        self.output_dir = Path(output_dir) if output_dir else Path(".")

    def region_report(self, records: list[Record]) -> dict[str, Any]:
        summaries = summarize_by_region(records)
        return {
            "report_type": "region_summary",
            "generated_date": date.today().isoformat(),
            "summary": {
                "total_records": len(records),
                "regions": len(summaries),
            },
            "region_breakdown": [
                {
                    "region": s.region,
                    "records": s.records,
                    "latest_tariff": s.latest_tariff,
                    "first_record": s.first_record.isoformat() if s.first_record else None,
                    "last_record": s.last_record.isoformat() if s.last_record else None,
                }
                for s in summaries
            ],
        }

    # ------------------------------------------------------------------
    # Export methods
    # ------------------------------------------------------------------

    def _write(self, text: str, filename: Optional[str]) -> None:
        if filename:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            (self.output_dir / filename).write_text(text, encoding="utf-8")

    def to_json(self, report: dict[str, Any], filename: Optional[str] = None) -> str:
        """Export a report to JSON. Returns the JSON string."""
        json_str = json.dumps(report, indent=2, ensure_ascii=False)
        self._write(json_str, filename)
        return json_str

    def to_csv(
        self,
        report: dict[str, Any],
        filename: Optional[str] = None,
        section: str = "region_breakdown",
    ) -> str:
        """Export one list section of a report to CSV. Returns the CSV string."""
        data = report.get(section, [])
        if not data:
            return ""
        csv_str = pd.DataFrame(data).to_csv(index=False, lineterminator="\n")
        self._write(csv_str, filename)
        return csv_str

    def format_text(self, report: dict[str, Any]) -> str:
        """Format a report as human-readable text for console output."""
        lines: list[str] = []
        title = report.get("report_type", "report").replace("_", " ").title()
        lines.append("=" * 60)
        lines.append(f"  {title}")
        lines.append(f"  Generated: {report.get('generated_date', '')}")
        lines.append("=" * 60)
        lines.append("")

        summary = report.get("summary", {})
        if summary:
            lines.append("SUMMARY")
            lines.append("-" * 40)
            for key, value in summary.items():
                lines.append(f"  {key.replace('_', ' ').title()}: {value}")
            lines.append("")

        breakdown = report.get("region_breakdown", [])
        if breakdown:
            lines.append("REGION BREAKDOWN")
            lines.append("-" * 40)
            for row in breakdown:
                lines.append(
                    f"  {row['region']:<24} {row['records']:>5} records | "
                    f"tariff {row['latest_tariff'] or '-'}"
                )
            lines.append("")

        return "\n".join(lines)
