"""
Bulk interchange - import/export of the whole ledger as one JSON document.

Document shape::

    {
      "employers":   [ {"id", "name", "contact"?}, ... ],
      "workEntries": [ {"id", "employerId", "description", "date", "rate",
                        "rateType", "hours"?, "status"}, ... ],
      "payments":    [ {"id", "workEntryId", "amount", "date"}, ... ]
    }

Import is all-or-nothing: the document is fully parsed into records before
the store is touched.  Referential integrity is NOT checked; orphaned
``employerId`` / ``workEntryId`` values are accepted as-is.  Cached statuses
are taken verbatim; ``LedgerService.reconcile_all`` refreshes them if the
file was edited by hand.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.domain.clock import Clock, SystemClock
from paytracker_kernel.domain.records import Employer, Payment, WorkEntry
from paytracker_kernel.domain.snapshot import LedgerSnapshot
from paytracker_kernel.exceptions import InterchangeFormatError, ValidationError
from paytracker_kernel.logging_config import get_logger
from paytracker_kernel.store import codec
from paytracker_kernel.store.record_store import RecordStore, snapshot_to_slots

logger = get_logger("services.interchange")

DOCUMENT_FIELDS: tuple[tuple[str, Any], ...] = (
    ("employers", Employer),
    ("workEntries", WorkEntry),
    ("payments", Payment),
)


def export_document(snapshot: LedgerSnapshot) -> str:
    """Pretty-printed JSON with exactly the three collection fields."""
    return codec.dumps(snapshot_to_slots(snapshot), indent=2)


def import_document(text: str) -> LedgerSnapshot:
    """
    Parse an exported document back into a snapshot.

    Raises:
        InterchangeFormatError: invalid JSON, a missing top-level field, or a
            record that does not match its shape.
    """
    try:
        data = codec.loads(text)
    except json.JSONDecodeError as exc:
        raise InterchangeFormatError(f"not valid JSON ({exc.msg})") from exc
    if not isinstance(data, dict):
        raise InterchangeFormatError("top level must be an object")

    collections: dict[str, tuple] = {}
    for field_name, record_type in DOCUMENT_FIELDS:
        rows = data.get(field_name)
        if rows is None:
            raise InterchangeFormatError(f"missing field {field_name!r}")
        if not isinstance(rows, list):
            raise InterchangeFormatError(f"field {field_name!r} must be an array")
        try:
            collections[field_name] = tuple(record_type.from_dict(row) for row in rows)
        except (ValidationError, TypeError, AttributeError) as exc:
            raise InterchangeFormatError(f"bad record in {field_name!r}: {exc}") from exc

    return LedgerSnapshot(
        employers=collections["employers"],
        work_entries=collections["workEntries"],
        payments=collections["payments"],
    )


class InterchangeService:
    """Backs up and restores the record store through the JSON document."""

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        config: PayTrackerConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or PayTrackerConfig()

    def export_json(self) -> str:
        return export_document(self._store.snapshot())

    def import_json(self, text: str) -> LedgerSnapshot:
        """Replace the whole store with the document's contents."""
        snapshot = import_document(text)
        self._store.replace_all(snapshot)
        logger.info("ledger_imported", extra={
            "employers": len(snapshot.employers),
            "work_entries": len(snapshot.work_entries),
            "payments": len(snapshot.payments),
        })
        return snapshot

    def backup_filename(self, on: date | None = None) -> str:
        """e.g. ``paytracker-backup-2024-02-01.json``"""
        day = on or self._clock.today()
        return f"{self._config.backup_filename_prefix}-{day.isoformat()}.json"

    def export_to(self, target: Path | str) -> Path:
        """
        Write a backup file.  A directory target gets the dated default name.
        """
        path = Path(target)
        if path.is_dir():
            path = path / self.backup_filename()
        path.write_text(self.export_json(), encoding="utf-8")
        logger.info("ledger_exported", extra={"path": str(path)})
        return path

    def import_from(self, path: Path | str) -> LedgerSnapshot:
        return self.import_json(Path(path).read_text(encoding="utf-8"))
