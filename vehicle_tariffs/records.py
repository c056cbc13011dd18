"""
Record model and the in-memory record store.

The store keeps records newest-first and mirrors every mutation to the
durable storage slot through a RecordPersistence adapter. Records are
never modified in place: every operation builds a new sequence and swaps
it in with a single assignment.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Iterator, Optional

from vehicle_tariffs.exceptions import ImportFormatError

if TYPE_CHECKING:
    from vehicle_tariffs.persistence import RecordPersistence

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
RECORD_FIELDS = ("id", "ts", "vehicle", "region", "tariff")


def to_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime."""
    return (moment - EPOCH) // timedelta(milliseconds=1)


def from_millis(ts: Any) -> Optional[datetime]:
    """Inverse of to_millis; None when ts is not a usable number."""
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        return None
    try:
        return EPOCH + timedelta(milliseconds=ts)
    except (OverflowError, ValueError):
        return None


def new_record_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Record:
    """
    A vehicle/region/tariff entry.

    ``ts`` is the creation time in milliseconds since the epoch, the same
    value written to storage and export files. Imported records are taken
    as they come, so their fields are not guaranteed to have these types.
    Hashing ignores ``extra``.
    """

    id: str
    ts: Optional[int]
    vehicle: str
    region: str
    tariff: str
    extra: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def created_at(self) -> Optional[datetime]:
        return from_millis(self.ts)

    def to_dict(self) -> dict[str, Any]:
        data = {name: getattr(self, name) for name in RECORD_FIELDS}
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        return cls(
            id=data.get("id"),
            ts=data.get("ts"),
            vehicle=data.get("vehicle"),
            region=data.get("region"),
            tariff=data.get("tariff"),
            extra={k: v for k, v in data.items() if k not in RECORD_FIELDS},
        )


def records_from_list(items: Sequence[Any], source: str = "input") -> list[Record]:
    """
    Convert a list of record objects into Records.

    Records pass through unchanged and dicts are converted without type
    checks; any other element is skipped with a warning.
    """
    records: list[Record] = []
    for i, item in enumerate(items):
        if isinstance(item, Record):
            records.append(item)
        elif isinstance(item, dict):
            records.append(Record.from_dict(item))
        else:
            logger.warning(
                "Skipping element %d from %s: expected an object, got %s",
                i + 1,
                source,
                type(item).__name__,
            )
    return records


def is_record_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


class RecordStore:
    """
    Ordered, persisted collection of records.

    Parameters
    ----------
    persistence : RecordPersistence
        Adapter used to load the initial sequence and to save after
        every mutation.
    id_factory : callable
        Returns a new unique record id. Defaults to random UUID4 strings.
    clock : callable, optional
        Returns the current aware datetime, used to stamp new records.
        Defaults to the UTC wall clock.
    """

    def __init__(
        self,
        persistence: "RecordPersistence",
        *,
        id_factory: Callable[[], str] = new_record_id,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._persistence = persistence
        self._id_factory = id_factory
        self._clock = clock or _utcnow
        self._records: list[Record] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.snapshot())

    def _commit(self, records: list[Record]) -> None:
        self._records = records
        self._persistence.save(records)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def load(self) -> list[Record]:
        """Replace the sequence with the persisted one; empty on any failure."""
        self._records = list(self._persistence.load())
        logger.debug("Loaded %d records", len(self._records))
        return self.snapshot()

    def insert(self, vehicle: str, region: str, tariff: str) -> Record:
        """Create a record, put it first, and persist."""
        if not vehicle or not region or not tariff:
            raise ValueError("vehicle, region and tariff must be non-empty")

        record = Record(
            id=self._id_factory(),
            ts=to_millis(self._clock()),
            vehicle=vehicle,
            region=region,
            tariff=tariff,
        )
        self._commit([record] + self._records)
        logger.debug("Inserted record %s (%s, %s)", record.id, vehicle, region)
        return copy.deepcopy(record)

    def delete_by_id(self, record_id: str) -> bool:
        """Remove the first record with this id. Persists even when nothing matched."""
        remaining = list(self._records)
        removed = False
        for i, record in enumerate(remaining):
            if record.id == record_id:
                del remaining[i]
                removed = True
                break
        self._commit(remaining)
        logger.debug("Delete %s: %s", record_id, "removed" if removed else "not found")
        return removed

    def clear_all(self) -> None:
        """Drop every record. Confirming intent is up to the caller."""
        count = len(self._records)
        self._commit([])
        logger.debug("Cleared %d records", count)

    def merge_imported(self, incoming: Sequence[Any]) -> list[Record]:
        """
        Put imported records ahead of the existing ones, in the given order.

        Records are not deduplicated by id. Raises ImportFormatError when
        ``incoming`` is not a list of records. Returns the merged records.
        """
        if not is_record_sequence(incoming):
            raise ImportFormatError(
                f"Expected a list of records, got {type(incoming).__name__}"
            )
        imported = copy.deepcopy(records_from_list(incoming, source="import"))
        self._commit(imported + self._records)
        logger.debug("Merged %d imported records", len(imported))
        return copy.deepcopy(imported)

    def snapshot(self) -> list[Record]:
        """Independent copy of the current sequence, newest first."""
        return copy.deepcopy(self._records)

    def get(self, record_id: str) -> Optional[Record]:
        for record in self._records:
            if record.id == record_id:
                return copy.deepcopy(record)
        return None
