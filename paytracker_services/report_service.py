"""
Report Service - read-only dashboard views over the record store.

Composes the aggregation engine with the current snapshot and the injected
clock.  Nothing here writes; every method reads one snapshot so its figures
are mutually consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from paytracker_config.schema import PayTrackerConfig
from paytracker_engines.aggregation import (
    ALL_EMPLOYERS,
    LedgerAggregator,
    PortfolioStats,
    ReportMode,
    Series,
    rank_by_pending,
)
from paytracker_engines.amounts import ZERO, amount_due, paid_by_entry
from paytracker_kernel.domain.clock import Clock, SystemClock
from paytracker_kernel.domain.records import Employer, Payment, WorkEntry, to_date
from paytracker_kernel.logging_config import get_logger
from paytracker_kernel.store.record_store import RecordStore

logger = get_logger("services.reports")

UNKNOWN_EMPLOYER = "Unknown Employer"
UNKNOWN_WORK = "N/A"


@dataclass(frozen=True)
class EmployerBalance:
    employer: Employer
    pending: Decimal


@dataclass(frozen=True)
class WorkLogRow:
    entry: WorkEntry
    employer_name: str
    amount_due: Decimal
    amount_paid: Decimal

    @property
    def outstanding(self) -> Decimal:
        return self.amount_due - self.amount_paid


@dataclass(frozen=True)
class PaymentRow:
    payment: Payment
    employer_name: str
    work_description: str


class ReportService:
    """
    Dashboard figures: stats cards, employer balances, work log, payment
    history and the Earned/Received chart series.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        config: PayTrackerConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        config = config or PayTrackerConfig()
        self._aggregator = LedgerAggregator(
            overdue_threshold_days=config.overdue_threshold_days,
        )

    def has_data(self) -> bool:
        """False when nothing has been logged or paid yet."""
        snapshot = self._store.snapshot()
        return bool(snapshot.work_entries or snapshot.payments)

    def portfolio_stats(self, as_of: date | None = None) -> PortfolioStats:
        snapshot = self._store.snapshot()
        return self._aggregator.portfolio_stats(
            work_entries=snapshot.work_entries,
            payments=snapshot.payments,
            as_of=to_date(as_of, "as_of") if as_of is not None else self._clock.today(),
        )

    def employer_balances(self) -> list[EmployerBalance]:
        """Every employer with its pending balance, largest balance first."""
        snapshot = self._store.snapshot()
        pending = self._aggregator.employer_pending(
            employers=snapshot.employers,
            work_entries=snapshot.work_entries,
            payments=snapshot.payments,
        )
        return [
            EmployerBalance(employer=employer, pending=amount)
            for employer, amount in rank_by_pending(snapshot.employers, pending)
        ]

    def work_log(self) -> list[WorkLogRow]:
        """
        Work entries newest first.

        Entries whose employer no longer exists show as "Unknown" with zero
        amounts rather than failing the whole listing.
        """
        snapshot = self._store.snapshot()
        names = {e.id: e.name for e in snapshot.employers}
        paid = paid_by_entry(snapshot.payments)
        rows = []
        for entry in sorted(snapshot.work_entries, key=lambda w: w.date, reverse=True):
            name = names.get(entry.employer_id)
            if name is None:
                rows.append(WorkLogRow(entry, "Unknown", ZERO, ZERO))
            else:
                rows.append(WorkLogRow(entry, name, amount_due(entry), paid.get(entry.id, ZERO)))
        return rows

    def payment_history(self) -> list[PaymentRow]:
        """Payments newest first, joined with their employer and work entry."""
        snapshot = self._store.snapshot()
        names = {e.id: e.name for e in snapshot.employers}
        entries = {w.id: w for w in snapshot.work_entries}
        rows = []
        for payment in sorted(snapshot.payments, key=lambda p: p.date, reverse=True):
            entry = entries.get(payment.work_entry_id)
            employer_name = names.get(entry.employer_id) if entry is not None else None
            rows.append(
                PaymentRow(
                    payment=payment,
                    employer_name=employer_name or UNKNOWN_EMPLOYER,
                    work_description=entry.description if entry is not None else UNKNOWN_WORK,
                )
            )
        return rows

    def series(
        self,
        mode: ReportMode | str = ReportMode.THIS_VS_LAST_MONTH,
        employer_filter: str = ALL_EMPLOYERS,
        *,
        as_of: date | None = None,
        year: int | None = None,
        month: int | None = None,
    ) -> Series:
        """
        Earned/Received chart data.

        ``year`` and ``month`` default to the clock's current year and month,
        ``as_of`` to today.
        """
        today = self._clock.today()
        snapshot = self._store.snapshot()
        series = self._aggregator.series(
            mode=ReportMode(mode),
            work_entries=snapshot.work_entries,
            payments=snapshot.payments,
            employer_filter=employer_filter,
            as_of=to_date(as_of, "as_of") if as_of is not None else today,
            year=year if year is not None else today.year,
            month=month if month is not None else today.month,
        )
        logger.debug("series_built", extra={
            "mode": series.mode.value,
            "employer_filter": employer_filter,
            "total_earned": str(series.total_earned),
            "total_received": str(series.total_received),
        })
        return series
