"""Domain layer - records, snapshot, clock and identity. Pure, zero I/O."""

from paytracker_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from paytracker_kernel.domain.identity import IdFactory, SequentialIds, uuid_ids
from paytracker_kernel.domain.records import (
    Employer,
    Payment,
    RateType,
    WorkEntry,
    WorkStatus,
    to_date,
    to_decimal,
)
from paytracker_kernel.domain.snapshot import LedgerSnapshot

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "IdFactory",
    "SequentialIds",
    "uuid_ids",
    "Employer",
    "Payment",
    "RateType",
    "WorkEntry",
    "WorkStatus",
    "to_date",
    "to_decimal",
    "LedgerSnapshot",
]
