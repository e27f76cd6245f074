"""
Module: paytracker_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    paytracker_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import paytracker_kernel.domain and kernel logging.
    MUST NOT import paytracker_services or paytracker_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in as explicit parameters by the services.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs (ids
      aside, which come from an injected factory).

Usage:
    from paytracker_engines.amounts import amount_due, derive_status
    from paytracker_engines.allocation import FifoAllocator
    from paytracker_engines.aggregation import LedgerAggregator, ReportMode
"""

from paytracker_engines.aggregation import (
    ALL_EMPLOYERS,
    Bucket,
    LedgerAggregator,
    PortfolioStats,
    ReportMode,
    Series,
    rank_by_pending,
)
from paytracker_engines.allocation import AllocationLine, FifoAllocation, FifoAllocator
from paytracker_engines.amounts import (
    amount_due,
    amount_paid,
    derive_status,
    outstanding,
    paid_by_entry,
)
from paytracker_engines.tracer import traced_engine

__all__ = [
    "ALL_EMPLOYERS",
    "AllocationLine",
    "Bucket",
    "FifoAllocation",
    "FifoAllocator",
    "LedgerAggregator",
    "PortfolioStats",
    "ReportMode",
    "Series",
    "amount_due",
    "amount_paid",
    "derive_status",
    "outstanding",
    "paid_by_entry",
    "rank_by_pending",
    "traced_engine",
]
