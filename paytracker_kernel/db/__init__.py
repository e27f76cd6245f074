"""Database layer - engine, base classes and slot model."""

from paytracker_kernel.db.base import Base
from paytracker_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from paytracker_kernel.db.models import LedgerSlot

__all__ = [
    "Base",
    "LedgerSlot",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session_factory",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
]
