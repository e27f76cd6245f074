"""
Module: paytracker_engines.allocation
Responsibility:
    Split one lump employer payment across that employer's outstanding work
    entries, oldest first (FIFO), producing the new payment records and the
    status each touched entry moves to.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import paytracker_kernel.domain and sibling engines.

Invariants enforced:
    - Ordering: eligible entries are sorted by work date ascending with a
      stable sort, so entries sharing a date keep their insertion order.
    - No overpayment: every created payment is at most the entry's
      outstanding balance as of the payments passed in.
    - Conservation: applied_total + unapplied == requested amount.
    - Purity: no clock access, no I/O.  Ids come from the injected factory.

Failure modes:
    - ValueError when ``amount`` is not positive.
    - An empty result (``is_noop``) when nothing was outstanding; the caller
      decides how to report it.

Usage:
    from paytracker_engines.allocation import FifoAllocator

    allocation = FifoAllocator().allocate(
        employer_id="emp-1",
        amount=Decimal("120"),
        payment_date=date(2024, 2, 1),
        work_entries=snapshot.work_entries,
        payments=snapshot.payments,
    )
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from paytracker_engines.amounts import ZERO, amount_due, derive_status, paid_by_entry
from paytracker_engines.tracer import traced_engine
from paytracker_kernel.domain.identity import IdFactory, uuid_ids
from paytracker_kernel.domain.records import Payment, WorkEntry, WorkStatus
from paytracker_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class AllocationLine:
    """
    Outcome for one work entry touched by the allocation.

    Guarantees:
        - ``applied + remaining == outstanding_before``.
    """

    work_entry_id: str
    outstanding_before: Decimal
    applied: Decimal
    new_status: WorkStatus

    @property
    def remaining(self) -> Decimal:
        return self.outstanding_before - self.applied


@dataclass(frozen=True)
class FifoAllocation:
    """
    Complete FIFO allocation result.

    Contract:
        Frozen summary of one allocation run; nothing here is persisted.
    Guarantees:
        - ``applied_total + unapplied == requested``.
        - ``status_updates`` has exactly one entry per created payment.
    Non-goals:
        - The unapplied remainder is reported only; it is never carried to
          a later allocation or stored as employer credit.
    """

    employer_id: str
    requested: Decimal
    payment_date: date
    lines: tuple[AllocationLine, ...] = ()
    created_payments: tuple[Payment, ...] = ()
    status_updates: Mapping[str, WorkStatus] = field(default_factory=dict)

    @property
    def applied_total(self) -> Decimal:
        return sum((p.amount for p in self.created_payments), ZERO)

    @property
    def unapplied(self) -> Decimal:
        return self.requested - self.applied_total

    @property
    def is_noop(self) -> bool:
        """True when no eligible outstanding entry received anything."""
        return not self.created_payments


class FifoAllocator:
    """
    Allocate a lump payment oldest-first.

    Contract:
        Pure function of its inputs apart from id generation.
        No I/O, no database access.
    Guarantees:
        - Outstanding balances are measured against the payments passed in,
          never against payments created earlier in the same call.
    Non-goals:
        - Does not write anything; the ledger service applies the result.
    """

    def __init__(self, id_factory: IdFactory = uuid_ids):
        self._new_id = id_factory

    @traced_engine(
        "fifo_allocation",
        "1.0",
        fingerprint_fields=("employer_id", "amount", "payment_date"),
    )
    def allocate(
        self,
        *,
        employer_id: str,
        amount: Decimal,
        payment_date: date,
        work_entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
    ) -> FifoAllocation:
        """
        Allocate ``amount`` across the employer's unpaid work entries.

        Args:
            employer_id: Employer whose entries receive the payment.
            amount: Lump amount to apply; must be positive.
            payment_date: Date stamped on every created payment.
            work_entries: All work entries, in insertion order.
            payments: Payments recorded before this call.

        Returns:
            FifoAllocation with the created payments and status updates.
        """
        if amount <= ZERO:
            raise ValueError(f"Allocation amount must be positive, got {amount}")

        t0 = time.monotonic()
        # Stable sort: same-date entries keep insertion order.
        eligible = sorted(
            (
                w
                for w in work_entries
                if w.employer_id == employer_id and w.status is not WorkStatus.PAID
            ),
            key=lambda w: w.date,
        )
        paid = paid_by_entry(payments)

        logger.info("fifo_allocation_started", extra={
            "employer_id": employer_id,
            "amount": str(amount),
            "eligible_entries": len(eligible),
        })

        remaining = amount
        lines: list[AllocationLine] = []
        created: list[Payment] = []
        status_updates: dict[str, WorkStatus] = {}

        for entry in eligible:
            if remaining <= ZERO:
                break

            due = amount_due(entry)
            already_paid = paid.get(entry.id, ZERO)
            balance = due - already_paid
            if balance <= ZERO:
                logger.warning("fifo_entry_without_balance", extra={
                    "work_entry_id": entry.id,
                    "status": entry.status.value,
                    "balance": str(balance),
                })
                continue

            applied = min(remaining, balance)
            new_status = derive_status(due, already_paid + applied)
            created.append(
                Payment(
                    id=self._new_id(),
                    work_entry_id=entry.id,
                    amount=applied,
                    date=payment_date,
                )
            )
            status_updates[entry.id] = new_status
            lines.append(
                AllocationLine(
                    work_entry_id=entry.id,
                    outstanding_before=balance,
                    applied=applied,
                    new_status=new_status,
                )
            )
            remaining -= applied

        result = FifoAllocation(
            employer_id=employer_id,
            requested=amount,
            payment_date=payment_date,
            lines=tuple(lines),
            created_payments=tuple(created),
            status_updates=status_updates,
        )

        # INVARIANT: applied + unapplied == requested
        assert result.applied_total + remaining == amount, (
            f"Allocation conservation violated: "
            f"{result.applied_total} + {remaining} != {amount}"
        )

        if result.is_noop:
            logger.warning("fifo_allocation_no_outstanding_work", extra={
                "employer_id": employer_id,
                "amount": str(amount),
            })
        else:
            logger.info("fifo_allocation_completed", extra={
                "employer_id": employer_id,
                "requested": str(amount),
                "applied": str(result.applied_total),
                "unapplied": str(result.unapplied),
                "entries_funded": len(created),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            })
        return result
