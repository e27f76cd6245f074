"""
Module: paytracker_engines.amounts
Responsibility:
    Amount Calculator and Status Deriver: what a work entry is worth, how
    much of it has been paid, what is still outstanding, and the payment
    status those two numbers imply.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import paytracker_kernel.domain.

Invariants enforced:
    - Amount due is derived, never stored: hours * rate for hourly work,
      rate for fixed work.
    - Status is a function of (amount due, amount paid) only.

Failure modes:
    - None.  Payments referencing other entries are ignored, and an
      outstanding balance may come back negative if data was overpaid by
      hand; callers decide what to do with that.

Usage:
    from paytracker_engines.amounts import amount_due, outstanding, derive_status

    due = amount_due(entry)
    status = derive_status(due, amount_paid(entry, payments))
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from paytracker_kernel.domain.records import Payment, RateType, WorkEntry, WorkStatus

ZERO = Decimal("0")


def amount_due(entry: WorkEntry) -> Decimal:
    """Billable amount of a work entry."""
    if entry.rate_type is RateType.HOURLY:
        return (entry.hours or ZERO) * entry.rate
    return entry.rate


def amount_paid(entry: WorkEntry, payments: Iterable[Payment]) -> Decimal:
    """Sum of all payments recorded against ``entry``."""
    return sum((p.amount for p in payments if p.work_entry_id == entry.id), ZERO)


def outstanding(entry: WorkEntry, payments: Iterable[Payment]) -> Decimal:
    """Amount due minus amount paid."""
    return amount_due(entry) - amount_paid(entry, payments)


def paid_by_entry(payments: Iterable[Payment]) -> dict[str, Decimal]:
    """Index of total paid per work entry id, for bulk calculations."""
    totals: dict[str, Decimal] = {}
    for payment in payments:
        totals[payment.work_entry_id] = totals.get(payment.work_entry_id, ZERO) + payment.amount
    return totals


def derive_status(due: Decimal, paid: Decimal) -> WorkStatus:
    """
    Payment status implied by the amounts.

    - paid >= due      -> PAID
    - 0 < paid < due   -> PARTIALLY_PAID
    - paid <= 0        -> PENDING
    """
    if paid >= due:
        return WorkStatus.PAID
    if paid > ZERO:
        return WorkStatus.PARTIALLY_PAID
    return WorkStatus.PENDING
