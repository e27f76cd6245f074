"""
Module: paytracker_kernel.store.slots
Responsibility: The key-value persistence contract: get/set of a named slot
    holding one record collection, with a set durably visible to the next
    get.  Two implementations: in-process dict and SQLAlchemy table.

Invariants enforced:
    - Values cross the boundary as JSON text, so a caller can never alias a
      stored collection and mutate it in place.
    - ``set_many`` on the SQL store writes all slots in one transaction;
      the contract itself only promises per-slot durability.

Failure modes:
    - ``StoreCorruptionError`` when a stored payload is not a JSON array.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from paytracker_kernel.db.engine import session_scope
from paytracker_kernel.db.models import LedgerSlot
from paytracker_kernel.exceptions import StoreCorruptionError
from paytracker_kernel.logging_config import get_logger
from paytracker_kernel.store import codec

logger = get_logger("store.slots")

EMPLOYERS_SLOT = "employers"
WORK_ENTRIES_SLOT = "workEntries"
PAYMENTS_SLOT = "payments"

ALL_SLOTS: tuple[str, ...] = (EMPLOYERS_SLOT, WORK_ENTRIES_SLOT, PAYMENTS_SLOT)


def _decode(slot: str, text: str) -> list[dict[str, Any]]:
    try:
        value = codec.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreCorruptionError(slot, str(exc)) from exc
    if not isinstance(value, list):
        raise StoreCorruptionError(slot, f"expected a JSON array, got {type(value).__name__}")
    return value


class SlotStore(ABC):
    """
    Persistence contract for the three record collections.

    Contract:
        ``get`` returns the last value ``set`` for the slot, or None when the
        slot was never written.
    Non-goals:
        - No cross-slot transactional guarantee; the ledger service keeps the
          collections consistent through its cascade rules.
    """

    @abstractmethod
    def get(self, slot: str) -> list[dict[str, Any]] | None:
        ...

    @abstractmethod
    def set(self, slot: str, value: list[dict[str, Any]]) -> None:
        ...

    def set_many(self, values: Mapping[str, list[dict[str, Any]]]) -> None:
        """Write several slots. Default: one ``set`` per slot."""
        for slot, value in values.items():
            self.set(slot, value)


class InMemorySlotStore(SlotStore):
    """Dict-backed slot store; the default when no database is configured."""

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def get(self, slot: str) -> list[dict[str, Any]] | None:
        text = self._slots.get(slot)
        if text is None:
            return None
        return _decode(slot, text)

    def set(self, slot: str, value: list[dict[str, Any]]) -> None:
        self._slots[slot] = codec.dumps(value)
        logger.debug("slot_written", extra={"slot": slot, "records": len(value)})


class SqlSlotStore(SlotStore):
    """
    Slot store persisted in the ``ledger_slots`` table.

    Contract:
        Receives a session factory from the caller; each get/set runs in
        its own short transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, slot: str) -> list[dict[str, Any]] | None:
        with session_scope(self._session_factory) as session:
            row = session.get(LedgerSlot, slot)
            text = row.payload if row is not None else None
        if text is None:
            return None
        return _decode(slot, text)

    def set(self, slot: str, value: list[dict[str, Any]]) -> None:
        self.set_many({slot: value})

    def set_many(self, values: Mapping[str, list[dict[str, Any]]]) -> None:
        with session_scope(self._session_factory) as session:
            for slot, value in values.items():
                payload = codec.dumps(value)
                row = session.get(LedgerSlot, slot)
                if row is None:
                    session.add(LedgerSlot(name=slot, payload=payload))
                else:
                    row.payload = payload
        logger.debug(
            "slots_written",
            extra={"slots": sorted(values), "records": sum(len(v) for v in values.values())},
        )
