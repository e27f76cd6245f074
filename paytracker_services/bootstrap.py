"""
Wiring - builds a ready-to-use ledger from a PayTrackerConfig.

``database_url`` selects the slot store: None keeps the three collections
in memory, any SQLAlchemy URL persists them in the ``ledger_slots`` table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from paytracker_config import get_active_config
from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from paytracker_kernel.domain.clock import Clock, SystemClock
from paytracker_kernel.domain.identity import IdFactory, uuid_ids
from paytracker_kernel.logging_config import configure_logging, get_logger
from paytracker_kernel.store.record_store import RecordStore
from paytracker_kernel.store.slots import InMemorySlotStore, SlotStore, SqlSlotStore
from paytracker_services.interchange import InterchangeService
from paytracker_services.ledger_service import LedgerService
from paytracker_services.report_service import ReportService

logger = get_logger("services.bootstrap")


@dataclass(frozen=True)
class PayTracker:
    """The assembled services sharing one record store."""

    config: PayTrackerConfig
    store: RecordStore
    ledger: LedgerService
    reports: ReportService
    interchange: InterchangeService


def build_slot_store(config: PayTrackerConfig) -> SlotStore:
    if config.database_url is None:
        return InMemorySlotStore()
    engine = init_engine_from_url(config.database_url)
    create_tables(engine)
    return SqlSlotStore(get_session_factory())


def build_paytracker(
    config: PayTrackerConfig | None = None,
    *,
    clock: Clock | None = None,
    id_factory: IdFactory = uuid_ids,
    slots: SlotStore | None = None,
) -> PayTracker:
    """
    Assemble store and services.

    Args:
        config: Defaults to ``get_active_config()``.
        clock: Defaults to the system clock.
        id_factory: Record id generator shared by every service.
        slots: Explicit slot store; overrides ``config.database_url``.
    """
    config = config or get_active_config()
    configure_logging(level=getattr(logging, config.log_level))
    clock = clock or SystemClock()
    store = RecordStore(slots or build_slot_store(config))
    logger.info("paytracker_ready", extra={"persistent": config.database_url is not None})
    return PayTracker(
        config=config,
        store=store,
        ledger=LedgerService(store, clock=clock, id_factory=id_factory),
        reports=ReportService(store, clock=clock, config=config),
        interchange=InterchangeService(store, clock=clock, config=config),
    )
