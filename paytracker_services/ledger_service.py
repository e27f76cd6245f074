"""
Ledger Service - every write against the employers / work entries / payments
collections goes through here.

Thin glue layer that:
1. Validates caller input (ValidationError before anything is touched)
2. Calls the engines for amounts, status derivation and FIFO allocation
3. Applies the result to the RecordStore in one atomic ``apply``
4. Re-derives cached work-entry statuses in a single reconcile step

All computation lives in engines. All persistence lives in the kernel store.
This service owns the transaction boundary: each public method is one
``RecordStore.apply`` call, so a failure leaves the store unchanged.

Usage:
    ledger = LedgerService(RecordStore(), clock=SystemClock())
    acme = ledger.add_employer("Acme Corp", contact="ap@acme.test")
    entry = ledger.add_work_entry(
        employer_id=acme.id, description="Logo design",
        work_date=date(2024, 1, 1), rate=Decimal("50"),
        rate_type=RateType.HOURLY, hours=Decimal("10"),
    )
    ledger.record_payment(entry.id, Decimal("200"))
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any

from paytracker_engines.allocation import FifoAllocation, FifoAllocator
from paytracker_engines.amounts import ZERO, amount_due, derive_status, outstanding, paid_by_entry
from paytracker_kernel.domain.clock import Clock, SystemClock
from paytracker_kernel.domain.identity import IdFactory, uuid_ids
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
from paytracker_kernel.exceptions import (
    EmployerNotFoundError,
    InvalidPaymentAmountError,
    NoOutstandingWorkError,
    PaymentExceedsOutstandingError,
    ValidationError,
    WorkEntryNotFoundError,
)
from paytracker_kernel.logging_config import LogContext, get_logger
from paytracker_kernel.store.record_store import RecordStore

logger = get_logger("services.ledger")

_UNSET: Any = object()


@dataclass(frozen=True)
class CascadeResult:
    """What a delete removed, counted per collection."""

    employers_removed: int = 0
    work_entries_removed: int = 0
    payments_removed: int = 0


def reconcile(snapshot: LedgerSnapshot, entry_ids: Iterable[str] | None = None) -> LedgerSnapshot:
    """
    Re-derive the cached status of work entries from their payments.

    This is the ONLY place a work entry's status changes after creation.

    Args:
        snapshot: State whose payments are already final.
        entry_ids: Entries to refresh; None refreshes every entry.

    Returns:
        A snapshot whose refreshed entries satisfy
        ``status == derive_status(amount_due, amount_paid)``.
    """
    targets = None if entry_ids is None else set(entry_ids)
    paid = paid_by_entry(snapshot.payments)
    changed = 0
    entries: list[WorkEntry] = []
    for entry in snapshot.work_entries:
        if targets is None or entry.id in targets:
            status = derive_status(amount_due(entry), paid.get(entry.id, ZERO))
            if status is not entry.status:
                entry = entry.with_status(status)
                changed += 1
        entries.append(entry)
    if not changed:
        return snapshot
    logger.debug("statuses_reconciled", extra={"changed": changed})
    return snapshot.with_changes(work_entries=entries)


def _require_positive_amount(amount: Any) -> Decimal:
    value = to_decimal(amount, "amount")
    if value <= ZERO:
        raise InvalidPaymentAmountError(value)
    return value


def _clean_contact(contact: str | None) -> str | None:
    if contact is None or not contact.strip():
        return None
    return contact


class LedgerService:
    """
    Orchestrates every ledger mutation through engines and the record store.

    Engine composition:
    - FifoAllocator: bulk employer payments
    - amounts: amount due / outstanding / status derivation

    Transaction boundary: one ``RecordStore.apply`` per public method.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        id_factory: IdFactory = uuid_ids,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._new_id = id_factory
        self._allocator = FifoAllocator(id_factory)

    @property
    def store(self) -> RecordStore:
        return self._store

    # =========================================================================
    # Employers
    # =========================================================================

    def add_employer(self, name: str, contact: str | None = None) -> Employer:
        employer = Employer(id=self._new_id(), name=name, contact=_clean_contact(contact))

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, Employer]:
            return snapshot.with_changes(employers=(*snapshot.employers, employer)), employer

        self._store.apply(mutation)
        logger.info("employer_added", extra={"employer_id": employer.id})
        return employer

    def update_employer(
        self,
        employer_id: str,
        *,
        name: str = _UNSET,
        contact: str | None = _UNSET,
    ) -> Employer:
        """Edit an employer's name and/or contact; the id never changes."""

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, Employer]:
            current = snapshot.find_employer(employer_id)
            if current is None:
                raise EmployerNotFoundError(employer_id)
            changes: dict[str, Any] = {}
            if name is not _UNSET:
                changes["name"] = name
            if contact is not _UNSET:
                changes["contact"] = _clean_contact(contact)
            updated = replace(current, **changes)
            employers = [updated if e.id == employer_id else e for e in snapshot.employers]
            return snapshot.with_changes(employers=employers), updated

        updated = self._store.apply(mutation)
        logger.info("employer_updated", extra={"employer_id": employer_id})
        return updated

    def delete_employer(self, employer_id: str) -> CascadeResult:
        """
        Delete an employer with all of its work entries and their payments.

        Raises:
            EmployerNotFoundError: if no employer has this id.
        """

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, CascadeResult]:
            if snapshot.find_employer(employer_id) is None:
                raise EmployerNotFoundError(employer_id)
            doomed = {w.id for w in snapshot.work_entries if w.employer_id == employer_id}
            employers = [e for e in snapshot.employers if e.id != employer_id]
            entries = [w for w in snapshot.work_entries if w.id not in doomed]
            payments = [p for p in snapshot.payments if p.work_entry_id not in doomed]
            result = CascadeResult(
                employers_removed=1,
                work_entries_removed=len(snapshot.work_entries) - len(entries),
                payments_removed=len(snapshot.payments) - len(payments),
            )
            return (
                snapshot.with_changes(employers=employers, work_entries=entries, payments=payments),
                result,
            )

        with LogContext.bind(operation="delete_employer", employer_id=employer_id):
            result = self._store.apply(mutation)
            logger.info("employer_deleted", extra={
                "work_entries_removed": result.work_entries_removed,
                "payments_removed": result.payments_removed,
            })
        return result

    # =========================================================================
    # Work entries
    # =========================================================================

    def add_work_entry(
        self,
        employer_id: str,
        description: str,
        work_date: date | str,
        rate: Decimal | int | str,
        rate_type: RateType | str,
        hours: Decimal | int | str | None = None,
    ) -> WorkEntry:
        """
        Log a unit of billable work.  New entries always start PENDING.

        ``hours`` is ignored for fixed-rate work.

        Raises:
            ValidationError: missing description, non-positive rate or hours.
            EmployerNotFoundError: ``employer_id`` does not exist.
        """
        entry = self._build_entry(
            entry_id=self._new_id(),
            employer_id=employer_id,
            description=description,
            work_date=work_date,
            rate=rate,
            rate_type=rate_type,
            hours=hours,
        )

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, WorkEntry]:
            if snapshot.find_employer(employer_id) is None:
                raise EmployerNotFoundError(employer_id)
            return snapshot.with_changes(work_entries=(*snapshot.work_entries, entry)), entry

        self._store.apply(mutation)
        logger.info("work_entry_added", extra={
            "work_entry_id": entry.id,
            "employer_id": employer_id,
            "amount_due": str(amount_due(entry)),
        })
        return entry

    def update_work_entry(
        self,
        work_entry_id: str,
        *,
        employer_id: str = _UNSET,
        description: str = _UNSET,
        work_date: date | str = _UNSET,
        rate: Decimal | int | str = _UNSET,
        rate_type: RateType | str = _UNSET,
        hours: Decimal | int | str | None = _UNSET,
    ) -> WorkEntry:
        """
        Edit a work entry.  Its cached status is re-derived from its payments
        so that a changed rate or hour count never leaves the status stale.
        """

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, WorkEntry]:
            current = snapshot.find_work_entry(work_entry_id)
            if current is None:
                raise WorkEntryNotFoundError(work_entry_id)
            target_employer = current.employer_id if employer_id is _UNSET else employer_id
            if snapshot.find_employer(target_employer) is None:
                raise EmployerNotFoundError(target_employer)
            edited = self._build_entry(
                entry_id=current.id,
                employer_id=target_employer,
                description=current.description if description is _UNSET else description,
                work_date=current.date if work_date is _UNSET else work_date,
                rate=current.rate if rate is _UNSET else rate,
                rate_type=current.rate_type if rate_type is _UNSET else rate_type,
                hours=current.hours if hours is _UNSET else hours,
                status=current.status,
            )
            entries = [edited if w.id == work_entry_id else w for w in snapshot.work_entries]
            updated = reconcile(snapshot.with_changes(work_entries=entries), [work_entry_id])
            return updated, updated.find_work_entry(work_entry_id)

        with LogContext.bind(operation="update_work_entry", work_entry_id=work_entry_id):
            edited = self._store.apply(mutation)
            logger.info("work_entry_updated", extra={"status": edited.status.value})
        return edited

    def delete_work_entry(self, work_entry_id: str) -> CascadeResult:
        """Delete a work entry and every payment recorded against it."""

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, CascadeResult]:
            if snapshot.find_work_entry(work_entry_id) is None:
                raise WorkEntryNotFoundError(work_entry_id)
            entries = [w for w in snapshot.work_entries if w.id != work_entry_id]
            payments = [p for p in snapshot.payments if p.work_entry_id != work_entry_id]
            result = CascadeResult(
                work_entries_removed=1,
                payments_removed=len(snapshot.payments) - len(payments),
            )
            return snapshot.with_changes(work_entries=entries, payments=payments), result

        with LogContext.bind(operation="delete_work_entry", work_entry_id=work_entry_id):
            result = self._store.apply(mutation)
            logger.info("work_entry_deleted", extra={"payments_removed": result.payments_removed})
        return result

    # =========================================================================
    # Payments
    # =========================================================================

    def record_payment(
        self,
        work_entry_id: str,
        amount: Decimal | int | str,
        payment_date: date | str | None = None,
    ) -> Payment:
        """
        Record a manual payment against one work entry.

        Preconditions:
            0 < amount <= outstanding balance of the entry.
        Postconditions:
            The payment is stored and the entry's status re-derived in the
            same commit.
        Raises:
            InvalidPaymentAmountError: amount is zero or negative.
            PaymentExceedsOutstandingError: amount above what is owed.
            WorkEntryNotFoundError: unknown work entry.
        """
        value = _require_positive_amount(amount)
        when = self._resolve_date(payment_date)

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, Payment]:
            entry = snapshot.find_work_entry(work_entry_id)
            if entry is None:
                raise WorkEntryNotFoundError(work_entry_id)
            balance = outstanding(entry, snapshot.payments)
            if value > balance:
                raise PaymentExceedsOutstandingError(work_entry_id, value, balance)
            payment = Payment(id=self._new_id(), work_entry_id=entry.id, amount=value, date=when)
            updated = snapshot.with_changes(payments=(*snapshot.payments, payment))
            return reconcile(updated, [entry.id]), payment

        with LogContext.bind(operation="record_payment", work_entry_id=work_entry_id):
            try:
                payment = self._store.apply(mutation)
            except ValidationError as exc:
                logger.warning("payment_rejected", extra={"code": exc.code, "amount": str(value)})
                raise
            logger.info("payment_recorded", extra={
                "payment_id": payment.id,
                "amount": str(payment.amount),
            })
        return payment

    def allocate_fifo(
        self,
        employer_id: str,
        amount: Decimal | int | str,
        payment_date: date | str | None = None,
    ) -> FifoAllocation:
        """
        Apply one lump payment to the employer's oldest outstanding work first.

        Any amount beyond the employer's total outstanding balance is reported
        as ``unapplied`` on the result and otherwise dropped.

        Raises:
            InvalidPaymentAmountError: amount is zero or negative.
            NoOutstandingWorkError: nothing outstanding for this employer; no
                state was changed.
        """
        value = _require_positive_amount(amount)
        when = self._resolve_date(payment_date)

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, FifoAllocation]:
            allocation = self._allocator.allocate(
                employer_id=employer_id,
                amount=value,
                payment_date=when,
                work_entries=snapshot.work_entries,
                payments=snapshot.payments,
            )
            if allocation.is_noop:
                raise NoOutstandingWorkError(employer_id, value, when)
            updated = snapshot.with_changes(
                payments=(*snapshot.payments, *allocation.created_payments)
            )
            return reconcile(updated, allocation.status_updates.keys()), allocation

        with LogContext.bind(operation="allocate_fifo", employer_id=employer_id):
            allocation = self._store.apply(mutation)
            logger.info("bulk_payment_applied", extra={
                "requested": str(allocation.requested),
                "applied": str(allocation.applied_total),
                "unapplied": str(allocation.unapplied),
                "payments_created": len(allocation.created_payments),
            })
        return allocation

    def reconcile_all(self) -> int:
        """
        Re-derive every cached status, e.g. after importing a hand-edited file.

        Returns:
            Number of work entries whose status changed.
        """

        def mutation(snapshot: LedgerSnapshot) -> tuple[LedgerSnapshot, int]:
            updated = reconcile(snapshot)
            changed = sum(
                1
                for before, after in zip(snapshot.work_entries, updated.work_entries)
                if before.status is not after.status
            )
            return updated, changed

        changed = self._store.apply(mutation)
        logger.info("ledger_reconciled", extra={"changed": changed})
        return changed

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_date(self, value: date | str | None) -> date:
        if value is None:
            return self._clock.today()
        return to_date(value, "date")

    @staticmethod
    def _build_entry(
        *,
        entry_id: str,
        employer_id: str,
        description: str,
        work_date: date | str,
        rate: Decimal | int | str,
        rate_type: RateType | str,
        hours: Decimal | int | str | None,
        status: WorkStatus = WorkStatus.PENDING,
    ) -> WorkEntry:
        try:
            kind = RateType(rate_type)
        except ValueError:
            raise ValidationError("rate_type", f"unknown rate type {rate_type!r}") from None
        if kind is RateType.HOURLY:
            hours_value = to_decimal(hours, "hours")
        else:
            hours_value = None
        return WorkEntry(
            id=entry_id,
            employer_id=employer_id,
            description=description,
            date=to_date(work_date, "date"),
            rate=to_decimal(rate, "rate"),
            rate_type=kind,
            hours=hours_value,
            status=status,
        )
