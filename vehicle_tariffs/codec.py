"""
JSON import and export of the record list.

Export writes the full list, pretty-printed. Import accepts any JSON
document whose top level is a list; the elements are taken as record
objects without checking their field types.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from vehicle_tariffs.exceptions import ImportFormatError
from vehicle_tariffs.records import Record, records_from_list

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FILENAME = "records.json"


def export_all(records: Iterable[Record]) -> bytes:
    """Serialize records to a pretty-printed UTF-8 JSON document."""
    payload = [r.to_dict() for r in records]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def parse_import(data: bytes | str) -> list[Record]:
    """
    Parse an import document into records.

    Raises ImportFormatError when the document is not valid JSON or its
    top level is not a list.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"Import file is not UTF-8 text: {e}") from e

    try:
        parsed = json.loads(data)
    except ValueError as e:
        raise ImportFormatError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise ImportFormatError(
            f"Invalid format: expected a list of records, got {type(parsed).__name__}"
        )
    return records_from_list(parsed, source="import")


def export_to_file(records: Iterable[Record], path: Path | str) -> Path:
    """Write the export document to a file and return its path."""
    path = Path(path)
    path.write_bytes(export_all(records))
    logger.debug("Exported records to %s", path)
    return path


def import_from_file(path: Path | str) -> list[Record]:
    """Read and parse an import file."""
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ImportFormatError(f"Cannot read {path}: {e}") from e
    return parse_import(raw)
