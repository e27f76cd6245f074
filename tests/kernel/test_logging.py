"""Tests for the structured logging system (paytracker_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from paytracker_kernel.domain.records import WorkStatus
from paytracker_kernel.exceptions import PaymentExceedsOutstandingError
from paytracker_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _isolated_logging():
    """Each test configures logging from scratch."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def emitted():
    """Configure logging at INFO into a buffer; returns a reader of parsed lines."""
    buffer = StringIO()
    configure_logging(stream=buffer)
    return lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]


class TestStructuredFormatter:

    def test_core_fields(self, emitted):
        get_logger("test").info("hello")

        (line,) = emitted()
        assert line["level"] == "INFO"
        assert line["message"] == "hello"
        assert line["logger"] == "paytracker.test"
        assert line["ts"].startswith("20")

    def test_ledger_values_serialized(self, emitted):
        get_logger("test").info(
            "payment_recorded",
            extra={"amount": Decimal("12.50"), "on": date(2024, 2, 1), "status": WorkStatus.PAID},
        )

        (line,) = emitted()
        assert line["amount"] == "12.50"
        assert line["on"] == "2024-02-01"
        assert line["status"] == "paid"

    def test_bound_context_merged(self, emitted):
        with LogContext.bind(operation="allocate_fifo", employer_id="emp-1"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")

        inside, outside = emitted()
        assert inside["operation"] == "allocate_fifo"
        assert inside["employer_id"] == "emp-1"
        assert "operation" not in outside

    def test_ledger_exception_fields_extracted(self, emitted):
        try:
            raise PaymentExceedsOutstandingError("w-1", Decimal("10"), Decimal("0"))
        except PaymentExceedsOutstandingError:
            get_logger("test").error("payment_error", exc_info=True)

        (line,) = emitted()
        assert line["exc_code"] == "PAYMENT_EXCEEDS_OUTSTANDING"
        assert line["exc_type"] == "PaymentExceedsOutstandingError"
        assert line["exc_work_entry_id"] == "w-1"
        assert line["exc_outstanding"] == "0"
        assert "Traceback" in line["traceback"]

    def test_debug_dropped_at_info(self, emitted):
        log = get_logger("test")
        log.info("kept")
        log.debug("dropped")

        assert [line["message"] for line in emitted()] == ["kept"]


class TestLogContext:

    def test_bind_restores_previous(self):
        LogContext.set(employer_id="outer")
        with LogContext.bind(employer_id="inner", operation="delete_employer"):
            assert LogContext.get_all() == {"employer_id": "inner", "operation": "delete_employer"}
        assert LogContext.get_all() == {"employer_id": "outer"}

    def test_none_values_ignored(self):
        LogContext.set(work_entry_id="w-1", operation=None)
        assert LogContext.get_all() == {"work_entry_id": "w-1"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(event_id="x")


class TestConfigureLogging:

    def test_only_first_call_attaches_a_handler(self):
        configure_logging(stream=StringIO())
        configure_logging(stream=StringIO())
        assert len(logging.getLogger("paytracker").handlers) == 1

    def test_reset_detaches(self):
        configure_logging(stream=StringIO())
        reset_logging()
        root = logging.getLogger("paytracker")
        assert root.handlers == []
        assert root.propagate is True
