"""
Module: paytracker_kernel.store.record_store
Responsibility: Holds the employers, work entries and payments collections
    in memory and persists them through a ``SlotStore``.  The only ways to
    change state are whole-collection replacement (``replace_all``) and a
    transactional ``apply`` of a mutation function.
Architecture position: Kernel > Store.  May import domain/, db/ and
    store/slots.  MUST NOT import engines, config or services.

Invariants enforced:
    - No record is mutated in place; every change produces a new snapshot.
    - ``apply`` runs read-compute-write under one re-entrant lock, so two
      reconciliation operations never interleave.
    - A mutation that raises leaves both memory and the slot store unchanged.

Failure modes:
    - ``StoreCorruptionError`` at load time when a slot holds records that
      cannot be decoded.
    - Any exception raised by a mutation propagates unchanged.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, TypeVar

from paytracker_kernel.domain.records import Employer, Payment, WorkEntry
from paytracker_kernel.domain.snapshot import LedgerSnapshot
from paytracker_kernel.exceptions import StoreCorruptionError, ValidationError
from paytracker_kernel.logging_config import get_logger
from paytracker_kernel.store.slots import (
    EMPLOYERS_SLOT,
    PAYMENTS_SLOT,
    WORK_ENTRIES_SLOT,
    InMemorySlotStore,
    SlotStore,
)

logger = get_logger("store.records")

T = TypeVar("T")

Mutation = Callable[[LedgerSnapshot], tuple[LedgerSnapshot, T]]


def _decode_records(slot: str, rows: list[dict[str, Any]] | None, record_type: Any) -> tuple:
    if rows is None:
        return ()
    try:
        return tuple(record_type.from_dict(row) for row in rows)
    except (ValidationError, TypeError, AttributeError) as exc:
        raise StoreCorruptionError(slot, str(exc)) from exc


def snapshot_to_slots(snapshot: LedgerSnapshot) -> dict[str, list[dict[str, Any]]]:
    """Dict form of every collection, keyed by slot name."""
    return {
        EMPLOYERS_SLOT: [e.to_dict() for e in snapshot.employers],
        WORK_ENTRIES_SLOT: [w.to_dict() for w in snapshot.work_entries],
        PAYMENTS_SLOT: [p.to_dict() for p in snapshot.payments],
    }


class RecordStore:
    """
    In-memory record collections backed by a slot store.

    Contract:
        ``snapshot()`` is cheap and returns an immutable value; callers may
        hold it as long as they like.
    Guarantees:
        - After ``apply`` or ``replace_all`` returns, the slot store holds the
          same collections as memory.
    """

    def __init__(self, slots: SlotStore | None = None):
        self._slots = slots or InMemorySlotStore()
        self._lock = threading.RLock()
        self._snapshot = self._load()

    def _load(self) -> LedgerSnapshot:
        snapshot = LedgerSnapshot(
            employers=_decode_records(EMPLOYERS_SLOT, self._slots.get(EMPLOYERS_SLOT), Employer),
            work_entries=_decode_records(
                WORK_ENTRIES_SLOT, self._slots.get(WORK_ENTRIES_SLOT), WorkEntry
            ),
            payments=_decode_records(PAYMENTS_SLOT, self._slots.get(PAYMENTS_SLOT), Payment),
        )
        logger.info(
            "record_store_loaded",
            extra={
                "employers": len(snapshot.employers),
                "work_entries": len(snapshot.work_entries),
                "payments": len(snapshot.payments),
            },
        )
        return snapshot

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return self._snapshot

    def replace_all(self, snapshot: LedgerSnapshot) -> None:
        """Replace all three collections at once."""
        with self._lock:
            self._write(snapshot)

    def apply(self, mutation: Mutation[T]) -> T:
        """
        Run ``mutation`` against the current snapshot and commit its result.

        Preconditions:
            ``mutation`` is a pure function of the snapshot it receives and
            returns ``(new_snapshot, result)``.
        Postconditions:
            The new snapshot is visible to the next ``snapshot()`` and
            persisted to every slot whose collection changed.
        """
        with self._lock:
            new_snapshot, result = mutation(self._snapshot)
            self._write(new_snapshot)
            return result

    def _write(self, snapshot: LedgerSnapshot) -> None:
        current = self._snapshot
        changed = {
            slot: rows
            for slot, rows in snapshot_to_slots(snapshot).items()
            if _collection(snapshot, slot) != _collection(current, slot)
        }
        if changed:
            self._slots.set_many(changed)
        self._snapshot = snapshot
        logger.debug("record_store_committed", extra={"slots": sorted(changed)})


def _collection(snapshot: LedgerSnapshot, slot: str) -> tuple:
    if slot == EMPLOYERS_SLOT:
        return snapshot.employers
    if slot == WORK_ENTRIES_SLOT:
        return snapshot.work_entries
    return snapshot.payments
