"""
Pytest fixtures for the income ledger test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- A deterministic clock pinned to 2024-03-15 and sequential record ids
- In-memory and SQLite-backed record stores
- Ledger, report and interchange services sharing one store
"""

import json
import logging
from datetime import date
from io import StringIO

import pytest

from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from paytracker_kernel.domain.clock import DeterministicClock
from paytracker_kernel.domain.identity import SequentialIds
from paytracker_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from paytracker_kernel.store.record_store import RecordStore
from paytracker_kernel.store.slots import InMemorySlotStore, SqlSlotStore
from paytracker_services.interchange import InterchangeService
from paytracker_services.ledger_service import LedgerService
from paytracker_services.report_service import ReportService

TODAY = date(2024, 3, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture paytracker logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.add_employer("Acme")
            logs = captured_logs()
            assert any(r["message"] == "employer_added" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("paytracker")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time and identity
# =============================================================================


@pytest.fixture
def clock():
    """Clock pinned to noon UTC on 2024-03-15."""
    return DeterministicClock.on(TODAY)


@pytest.fixture
def ids():
    return SequentialIds()


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def slots():
    return InMemorySlotStore()


@pytest.fixture
def store(slots):
    return RecordStore(slots)


@pytest.fixture
def sql_session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables(engine)
    yield get_session_factory()
    drop_tables(engine)
    reset_engine()


@pytest.fixture
def sql_slots(sql_session_factory):
    return SqlSlotStore(sql_session_factory)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def config():
    return PayTrackerConfig()


@pytest.fixture
def ledger(store, clock, ids):
    return LedgerService(store, clock=clock, id_factory=ids)


@pytest.fixture
def reports(store, clock, config):
    return ReportService(store, clock=clock, config=config)


@pytest.fixture
def interchange(store, clock, config):
    return InterchangeService(store, clock=clock, config=config)
