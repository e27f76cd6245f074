"""
Tests for ReportService.

Covers:
- Portfolio stats against the injected clock
- Employer balances ranked by pending amount
- Work log and payment history ordering and dangling references
- Series defaults for year and month
"""

from datetime import date, datetime
from decimal import Decimal

from paytracker_engines.aggregation import ReportMode
from paytracker_kernel.domain.records import Payment, RateType
from paytracker_services.report_service import UNKNOWN_EMPLOYER, UNKNOWN_WORK


class TestDashboard:

    def test_has_data(self, ledger, reports):
        assert not reports.has_data()
        employer = ledger.add_employer("Acme")
        assert not reports.has_data()
        ledger.add_work_entry(employer.id, "Logo", date(2024, 3, 1), "100", RateType.FIXED)
        assert reports.has_data()

    def test_portfolio_stats_uses_clock(self, ledger, reports):
        employer = ledger.add_employer("Acme")
        old = ledger.add_work_entry(employer.id, "Old", date(2024, 1, 2), "100", RateType.FIXED)
        ledger.add_work_entry(employer.id, "New", date(2024, 3, 10), "40", RateType.FIXED)
        ledger.record_payment(old.id, "25", date(2024, 3, 1))

        stats = reports.portfolio_stats()

        assert stats.total_pending == Decimal("115")
        assert stats.total_received == Decimal("25")
        assert stats.overdue_count == 1

    def test_portfolio_stats_accepts_datetime_as_of(self, ledger, reports):
        employer = ledger.add_employer("Acme")
        ledger.add_work_entry(employer.id, "Old", datetime(2024, 1, 5, 9, 30), "100", RateType.FIXED)

        stats = reports.portfolio_stats(as_of=datetime(2024, 3, 1, 18, 0))

        assert stats.overdue_count == 1
        assert stats.total_pending == Decimal("100")

    def test_overdue_threshold_from_config(self, store, clock, ledger):
        from paytracker_config.schema import PayTrackerConfig
        from paytracker_services.report_service import ReportService

        employer = ledger.add_employer("Acme")
        ledger.add_work_entry(employer.id, "Recent", date(2024, 3, 5), "40", RateType.FIXED)
        strict = ReportService(store, clock=clock, config=PayTrackerConfig(overdue_threshold_days=7))

        assert strict.portfolio_stats().overdue_count == 1

    def test_employer_balances_ranked(self, ledger, reports):
        small = ledger.add_employer("Small")
        big = ledger.add_employer("Big")
        idle = ledger.add_employer("Idle")
        ledger.add_work_entry(small.id, "a", date(2024, 3, 1), "50", RateType.FIXED)
        ledger.add_work_entry(big.id, "b", date(2024, 3, 1), "10", RateType.HOURLY, hours="30")

        balances = reports.employer_balances()

        assert [(b.employer.name, b.pending) for b in balances] == [
            ("Big", Decimal("300")),
            ("Small", Decimal("50")),
            ("Idle", Decimal("0")),
        ]


class TestListings:

    def test_work_log_newest_first(self, ledger, reports):
        employer = ledger.add_employer("Acme")
        first = ledger.add_work_entry(employer.id, "first", date(2024, 1, 1), "100", RateType.FIXED)
        second = ledger.add_work_entry(employer.id, "second", date(2024, 2, 1), "200", RateType.FIXED)
        ledger.record_payment(first.id, "40")

        rows = reports.work_log()

        assert [r.entry.id for r in rows] == [second.id, first.id]
        assert rows[1].employer_name == "Acme"
        assert rows[1].amount_due == Decimal("100")
        assert rows[1].amount_paid == Decimal("40")
        assert rows[1].outstanding == Decimal("60")

    def test_work_log_dangling_employer(self, ledger, reports, store):
        employer = ledger.add_employer("Acme")
        entry = ledger.add_work_entry(employer.id, "orphan", date(2024, 1, 1), "100", RateType.FIXED)
        store.replace_all(store.snapshot().with_changes(employers=()))

        (row,) = reports.work_log()

        assert row.entry.id == entry.id
        assert row.employer_name == "Unknown"
        assert row.amount_due == Decimal("0")
        assert row.amount_paid == Decimal("0")

    def test_payment_history(self, ledger, reports, store):
        employer = ledger.add_employer("Acme")
        entry = ledger.add_work_entry(employer.id, "Logo", date(2024, 1, 1), "100", RateType.FIXED)
        ledger.record_payment(entry.id, "10", date(2024, 1, 5))
        ledger.record_payment(entry.id, "20", date(2024, 2, 5))
        snapshot = store.snapshot()
        store.replace_all(
            snapshot.with_changes(
                payments=(
                    *snapshot.payments,
                    Payment(id="p-x", work_entry_id="gone", amount=Decimal("5"), date=date(2024, 1, 20)),
                )
            )
        )

        rows = reports.payment_history()

        assert [r.payment.amount for r in rows] == [Decimal("20"), Decimal("5"), Decimal("10")]
        assert rows[0].employer_name == "Acme"
        assert rows[0].work_description == "Logo"
        assert rows[1].employer_name == UNKNOWN_EMPLOYER
        assert rows[1].work_description == UNKNOWN_WORK


class TestSeries:

    def setup_data(self, ledger):
        employer = ledger.add_employer("Acme")
        other = ledger.add_employer("Globex")
        entry = ledger.add_work_entry(employer.id, "Logo", date(2024, 2, 20), "100", RateType.FIXED)
        ledger.add_work_entry(other.id, "Audit", date(2024, 3, 2), "300", RateType.FIXED)
        ledger.record_payment(entry.id, "60", date(2024, 3, 1))
        return employer, other

    def test_default_is_this_vs_last_month(self, ledger, reports):
        self.setup_data(ledger)

        series = reports.series()

        assert series.mode is ReportMode.THIS_VS_LAST_MONTH
        last, this = series.buckets
        assert last.earned == Decimal("100")
        assert this.earned == Decimal("300")
        assert this.received == Decimal("60")

    def test_year_defaults_to_current_year(self, ledger, reports):
        self.setup_data(ledger)
        series = reports.series(ReportMode.YEAR)
        assert series.total_earned == Decimal("400")

    def test_month_defaults_to_current_month(self, ledger, reports):
        self.setup_data(ledger)
        series = reports.series("month")
        assert len(series.buckets) == 31
        assert series.total_earned == Decimal("300")

    def test_employer_filter(self, ledger, reports):
        employer, other = self.setup_data(ledger)
        series = reports.series(ReportMode.YEAR, employer.id, year=2024)
        assert series.total_earned == Decimal("100")
        assert series.total_received == Decimal("60")
