"""
Tests for bulk JSON import/export.

Covers:
- Export shape and a round trip through a fresh store
- All-or-nothing import on malformed documents
- Backup file naming and file-based export/import
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from paytracker_engines.amounts import amount_due, amount_paid, derive_status
from paytracker_kernel.domain.records import RateType, WorkStatus
from paytracker_kernel.exceptions import InterchangeFormatError
from paytracker_kernel.store.record_store import RecordStore
from paytracker_services.interchange import InterchangeService, import_document


def _populate(ledger):
    employer = ledger.add_employer("Acme", contact="ap@acme.test")
    hourly = ledger.add_work_entry(
        employer.id, "Logo", date(2024, 1, 1), "42.50", RateType.HOURLY, hours="1.5",
    )
    fixed = ledger.add_work_entry(employer.id, "Site", date(2024, 1, 2), "100", RateType.FIXED)
    ledger.record_payment(hourly.id, "20.25", date(2024, 1, 10))
    ledger.record_payment(fixed.id, "100", date(2024, 1, 11))
    return employer, hourly, fixed


class TestExport:

    def test_document_shape(self, ledger, interchange):
        _populate(ledger)

        data = json.loads(interchange.export_json())

        assert set(data) == {"employers", "workEntries", "payments"}
        assert data["employers"][0] == {"id": "id-1", "name": "Acme", "contact": "ap@acme.test"}
        hourly = data["workEntries"][0]
        assert hourly["employerId"] == "id-1"
        assert hourly["rateType"] == "hourly"
        assert hourly["hours"] == 1.5
        assert hourly["status"] == "partially_paid"
        assert "hours" not in data["workEntries"][1]
        assert data["payments"][1]["workEntryId"] == data["workEntries"][1]["id"]
        assert data["payments"][1]["amount"] == 100

    def test_round_trip(self, ledger, store, interchange, clock):
        _populate(ledger)
        exported = interchange.export_json()

        target = RecordStore()
        InterchangeService(target, clock=clock).import_json(exported)

        assert target.snapshot() == store.snapshot()
        assert target.snapshot().work_entries[0].rate == Decimal("42.50")

    def test_round_trip_keeps_full_precision(self, ledger, store, interchange, clock):
        employer = ledger.add_employer("Acme")
        entry = ledger.add_work_entry(
            employer.id, "Retainer", date(2024, 1, 1), "10.000000000000000001", RateType.FIXED,
        )
        ledger.record_payment(entry.id, "10", date(2024, 1, 5))

        target = RecordStore()
        InterchangeService(target, clock=clock).import_json(interchange.export_json())

        restored = target.snapshot().work_entries[0]
        assert target.snapshot() == store.snapshot()
        assert restored.rate == Decimal("10.000000000000000001")
        assert restored.status is WorkStatus.PARTIALLY_PAID
        assert derive_status(amount_due(restored), amount_paid(restored, target.snapshot().payments)) is (
            WorkStatus.PARTIALLY_PAID
        )

    def test_empty_ledger(self, interchange):
        assert json.loads(interchange.export_json()) == {
            "employers": [],
            "workEntries": [],
            "payments": [],
        }


class TestImport:

    def test_replaces_existing_data(self, ledger, store, interchange):
        _populate(ledger)
        interchange.import_json('{"employers": [], "workEntries": [], "payments": []}')
        assert store.snapshot().is_empty

    def test_statuses_taken_verbatim(self, interchange, store):
        document = {
            "employers": [{"id": "e", "name": "Acme"}],
            "workEntries": [{
                "id": "w", "employerId": "e", "description": "x", "date": "2024-01-01",
                "rate": 100, "rateType": "fixed", "status": "paid",
            }],
            "payments": [],
        }
        interchange.import_json(json.dumps(document))
        assert store.snapshot().work_entries[0].status is WorkStatus.PAID

    def test_orphans_accepted(self, interchange, store):
        document = {
            "employers": [],
            "workEntries": [],
            "payments": [{"id": "p", "workEntryId": "gone", "amount": 5, "date": "2024-01-01"}],
        }
        interchange.import_json(json.dumps(document))
        assert store.snapshot().payments[0].work_entry_id == "gone"

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "[]",
            '{"employers": [], "workEntries": []}',
            '{"employers": [], "workEntries": [], "payments": null}',
            '{"employers": {}, "workEntries": [], "payments": []}',
            '{"employers": [{"name": "no id"}], "workEntries": [], "payments": []}',
            '{"employers": [], "workEntries": [{"id": "w", "employerId": "e", "description": "x",'
            ' "date": "2024-01-01", "rate": 1, "rateType": "weekly"}], "payments": []}',
            '{"employers": [], "workEntries": [], "payments": [{"id": "p", "workEntryId": "w",'
            ' "amount": -1, "date": "2024-01-01"}]}',
        ],
    )
    def test_malformed_document_leaves_store_unchanged(self, ledger, store, interchange, text):
        _populate(ledger)
        before = store.snapshot()

        with pytest.raises(InterchangeFormatError) as exc_info:
            interchange.import_json(text)

        assert str(exc_info.value).startswith("Invalid data format")
        assert store.snapshot() is before

    def test_import_document_is_pure(self):
        snapshot = import_document('{"employers": [{"id": "e", "name": "Acme"}], "workEntries": [], "payments": []}')
        assert snapshot.employers[0].name == "Acme"


class TestBackupFiles:

    def test_default_filename(self, interchange):
        assert interchange.backup_filename() == "paytracker-backup-2024-03-15.json"
        assert interchange.backup_filename(date(2024, 2, 1)) == "paytracker-backup-2024-02-01.json"

    def test_export_to_directory_and_back(self, ledger, store, interchange, tmp_path):
        _populate(ledger)

        path = interchange.export_to(tmp_path)

        assert path == tmp_path / "paytracker-backup-2024-03-15.json"
        restored = RecordStore()
        InterchangeService(restored).import_from(path)
        assert restored.snapshot() == store.snapshot()

    def test_export_to_explicit_file(self, interchange, tmp_path):
        path = interchange.export_to(tmp_path / "ledger.json")
        assert path.name == "ledger.json"
        assert json.loads(path.read_text())["payments"] == []
