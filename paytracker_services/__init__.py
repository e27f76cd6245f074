"""
paytracker_services -- orchestration layer.

Services own the transaction boundary: they read a snapshot from the
record store, call the pure engines, and commit the result in one atomic
``RecordStore.apply``.
"""

from paytracker_services.bootstrap import PayTracker, build_paytracker
from paytracker_services.interchange import (
    InterchangeService,
    export_document,
    import_document,
)
from paytracker_services.ledger_service import CascadeResult, LedgerService, reconcile
from paytracker_services.report_service import (
    EmployerBalance,
    PaymentRow,
    ReportService,
    WorkLogRow,
)

__all__ = [
    "CascadeResult",
    "EmployerBalance",
    "InterchangeService",
    "LedgerService",
    "PayTracker",
    "PaymentRow",
    "ReportService",
    "WorkLogRow",
    "build_paytracker",
    "export_document",
    "import_document",
    "reconcile",
]
