"""
Module: paytracker_engines.aggregation
Responsibility:
    Roll work entries and payments up into the figures the dashboard shows:
    portfolio stats (pending, received, overdue), per-employer pending
    balances, and Earned/Received series bucketed by month or by day.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import paytracker_kernel.domain and sibling engines.

Invariants enforced:
    - Purity: "today" arrives as an explicit ``as_of`` date; the engine never
      reads a clock.
    - Earned is accounted on the work date (amount due, regardless of
      payment status); Received is accounted on the payment date,
      regardless of which entry the payment targets.  The two need not
      reconcile inside a bucket.
    - Records outside every bucket of a series are dropped, not carried.
    - Dangling references count as "unknown": a payment whose entry is
      missing is still received money in the unfiltered view.

Failure modes:
    - ValueError for a month outside 1..12 or an unknown report mode.

Usage:
    from paytracker_engines.aggregation import LedgerAggregator, ReportMode

    aggregator = LedgerAggregator(overdue_threshold_days=30)
    stats = aggregator.portfolio_stats(
        work_entries=snapshot.work_entries,
        payments=snapshot.payments,
        as_of=date(2024, 3, 1),
    )
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from paytracker_engines.amounts import ZERO, amount_due, paid_by_entry
from paytracker_engines.tracer import traced_engine
from paytracker_kernel.domain.records import Employer, Payment, WorkEntry, WorkStatus
from paytracker_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

ALL_EMPLOYERS = "all"

MONTH_LABELS: tuple[str, ...] = tuple(calendar.month_abbr[1:])


class ReportMode(str, Enum):
    """Time bucketing of an Earned/Received series."""

    THIS_VS_LAST_MONTH = "this_vs_last_month"
    YEAR = "year"
    MONTH = "month"


@dataclass(frozen=True)
class PortfolioStats:
    """Headline figures across every employer."""

    total_pending: Decimal
    total_received: Decimal
    overdue_count: int


@dataclass(frozen=True)
class Bucket:
    """One time slice of a series."""

    label: str
    earned: Decimal = ZERO
    received: Decimal = ZERO


@dataclass(frozen=True)
class Series:
    """
    Earned/Received totals per bucket, in display order.

    Guarantees:
        - ``total_earned`` and ``total_received`` are the bucket sums.
    """

    mode: ReportMode
    employer_filter: str
    buckets: tuple[Bucket, ...]

    @property
    def total_earned(self) -> Decimal:
        return sum((b.earned for b in self.buckets), ZERO)

    @property
    def total_received(self) -> Decimal:
        return sum((b.received for b in self.buckets), ZERO)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(b.label for b in self.buckets)


def age_in_days(work_date: date, as_of: date) -> int:
    """Whole calendar days between the work date and ``as_of``."""
    return (as_of - work_date).days


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


class _Accumulator:
    """Mutable per-bucket totals used while building a Series."""

    def __init__(self, labels: Sequence[str]):
        self.labels = tuple(labels)
        self.earned = [ZERO] * len(self.labels)
        self.received = [ZERO] * len(self.labels)

    def freeze(self) -> tuple[Bucket, ...]:
        return tuple(
            Bucket(label=label, earned=e, received=r)
            for label, e, r in zip(self.labels, self.earned, self.received)
        )


class LedgerAggregator:
    """
    Aggregate ledger records into summary figures.

    Contract:
        Pure functions over (work_entries, payments, employers) plus an
        employer filter and a report mode.  No I/O.
    Guarantees:
        - Pending balances only include entries whose cached status is not
          PAID.
        - An entry is overdue when it is not PAID and its work date lies
          strictly more than ``overdue_threshold_days`` calendar days before
          ``as_of``.
    """

    def __init__(self, overdue_threshold_days: int = 30):
        if overdue_threshold_days < 0:
            raise ValueError("overdue_threshold_days cannot be negative")
        self.overdue_threshold_days = overdue_threshold_days

    # =========================================================================
    # Portfolio figures
    # =========================================================================

    @traced_engine("aggregation.portfolio", "1.0", fingerprint_fields=("as_of",))
    def portfolio_stats(
        self,
        *,
        work_entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        as_of: date,
    ) -> PortfolioStats:
        paid = paid_by_entry(payments)
        total_received = sum((p.amount for p in payments), ZERO)
        total_pending = ZERO
        overdue = 0
        for entry in work_entries:
            if entry.status is WorkStatus.PAID:
                continue
            total_pending += amount_due(entry) - paid.get(entry.id, ZERO)
            if self.is_overdue(entry, as_of):
                overdue += 1

        logger.debug("portfolio_stats_computed", extra={
            "total_pending": str(total_pending),
            "total_received": str(total_received),
            "overdue_count": overdue,
        })
        return PortfolioStats(
            total_pending=total_pending,
            total_received=total_received,
            overdue_count=overdue,
        )

    def is_overdue(self, entry: WorkEntry, as_of: date) -> bool:
        if entry.status is WorkStatus.PAID:
            return False
        return age_in_days(entry.date, as_of) > self.overdue_threshold_days

    def employer_pending(
        self,
        *,
        employers: Sequence[Employer],
        work_entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
    ) -> dict[str, Decimal]:
        """Outstanding balance across each employer's unpaid entries (0 if none)."""
        paid = paid_by_entry(payments)
        pending = {employer.id: ZERO for employer in employers}
        for entry in work_entries:
            if entry.status is WorkStatus.PAID or entry.employer_id not in pending:
                continue
            pending[entry.employer_id] += amount_due(entry) - paid.get(entry.id, ZERO)
        return pending

    # =========================================================================
    # Time-bucketed series
    # =========================================================================

    @staticmethod
    def filter_for_employer(
        work_entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        employer_filter: str = ALL_EMPLOYERS,
    ) -> tuple[tuple[WorkEntry, ...], tuple[Payment, ...]]:
        """Restrict both collections to one employer, or pass them through for 'all'."""
        if employer_filter == ALL_EMPLOYERS:
            return tuple(work_entries), tuple(payments)
        entries = tuple(w for w in work_entries if w.employer_id == employer_filter)
        entry_ids = {w.id for w in entries}
        return entries, tuple(p for p in payments if p.work_entry_id in entry_ids)

    @traced_engine(
        "aggregation.series",
        "1.0",
        fingerprint_fields=("mode", "employer_filter", "as_of", "year", "month"),
    )
    def series(
        self,
        *,
        mode: ReportMode,
        work_entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        employer_filter: str = ALL_EMPLOYERS,
        as_of: date | None = None,
        year: int | None = None,
        month: int | None = None,
    ) -> Series:
        """
        Build an Earned/Received series.

        Preconditions:
            - THIS_VS_LAST_MONTH requires ``as_of``.
            - YEAR requires ``year``; MONTH requires ``year`` and ``month``.
        """
        entries, pays = self.filter_for_employer(work_entries, payments, employer_filter)
        mode = ReportMode(mode)

        match mode:
            case ReportMode.THIS_VS_LAST_MONTH:
                if as_of is None:
                    raise ValueError("as_of is required for this_vs_last_month")
                buckets = self._this_vs_last_month(entries, pays, as_of)
            case ReportMode.YEAR:
                if year is None:
                    raise ValueError("year is required for a yearly series")
                buckets = self._yearly(entries, pays, year)
            case ReportMode.MONTH:
                if year is None or month is None:
                    raise ValueError("year and month are required for a monthly series")
                buckets = self._monthly(entries, pays, year, month)
            case _:
                raise ValueError(f"Unknown report mode: {mode}")

        return Series(mode=mode, employer_filter=employer_filter, buckets=buckets)

    def _this_vs_last_month(
        self,
        entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        as_of: date,
    ) -> tuple[Bucket, ...]:
        windows = {
            previous_month(as_of.year, as_of.month): 0,
            (as_of.year, as_of.month): 1,
        }
        acc = _Accumulator(("Last Month", "This Month"))
        for entry in entries:
            index = windows.get((entry.date.year, entry.date.month))
            if index is not None:
                acc.earned[index] += amount_due(entry)
        for payment in payments:
            index = windows.get((payment.date.year, payment.date.month))
            if index is not None:
                acc.received[index] += payment.amount
        return acc.freeze()

    def _yearly(
        self,
        entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        year: int,
    ) -> tuple[Bucket, ...]:
        acc = _Accumulator(MONTH_LABELS)
        for entry in entries:
            if entry.date.year == year:
                acc.earned[entry.date.month - 1] += amount_due(entry)
        for payment in payments:
            if payment.date.year == year:
                acc.received[payment.date.month - 1] += payment.amount
        return acc.freeze()

    def _monthly(
        self,
        entries: Sequence[WorkEntry],
        payments: Sequence[Payment],
        year: int,
        month: int,
    ) -> tuple[Bucket, ...]:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be in 1..12, got {month}")
        days = calendar.monthrange(year, month)[1]
        acc = _Accumulator([str(day) for day in range(1, days + 1)])
        for entry in entries:
            if (entry.date.year, entry.date.month) == (year, month):
                acc.earned[entry.date.day - 1] += amount_due(entry)
        for payment in payments:
            if (payment.date.year, payment.date.month) == (year, month):
                acc.received[payment.date.day - 1] += payment.amount
        return acc.freeze()


def rank_by_pending(
    employers: Sequence[Employer],
    pending: Mapping[str, Decimal],
) -> list[tuple[Employer, Decimal]]:
    """Employers ordered by pending balance, largest first; ties keep input order."""
    ranked = [(employer, pending.get(employer.id, ZERO)) for employer in employers]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked
