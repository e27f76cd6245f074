"""Record store - slot persistence contract and in-memory collections."""

from paytracker_kernel.store.record_store import RecordStore, snapshot_to_slots
from paytracker_kernel.store.slots import (
    ALL_SLOTS,
    EMPLOYERS_SLOT,
    PAYMENTS_SLOT,
    WORK_ENTRIES_SLOT,
    InMemorySlotStore,
    SlotStore,
    SqlSlotStore,
)

__all__ = [
    "ALL_SLOTS",
    "EMPLOYERS_SLOT",
    "PAYMENTS_SLOT",
    "WORK_ENTRIES_SLOT",
    "InMemorySlotStore",
    "RecordStore",
    "SlotStore",
    "SqlSlotStore",
    "snapshot_to_slots",
]
