"""
Module: paytracker_kernel.db.engine
Responsibility: Owns the process-wide SQLAlchemy engine and session factory
    used by the SQL slot store, and the commit-or-rollback session scope.
Architecture position: Kernel > DB.  May import db/base.py and db/models.py
    only.

Invariants enforced:
    - At most one live engine; initializing again disposes the old one.
    - In-memory SQLite is pinned to a single connection (StaticPool),
      otherwise each pooled connection would see its own empty database.

Failure modes:
    - RuntimeError from get_engine()/get_session_factory() before
      init_engine_from_url().
    - Any exception inside session_scope() rolls the transaction back and
      propagates.
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from paytracker_kernel.db import models  # noqa: F401  (registers ledger_slots)
from paytracker_kernel.db.base import Base
from paytracker_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _engine_options(database_url: str, echo: bool) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        options["pool_pre_ping"] = True
        return options
    options["connect_args"] = {"check_same_thread": False}
    if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
        options["poolclass"] = StaticPool
    return options


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for ``database_url`` and a matching session factory.

    Args:
        database_url: Any SQLAlchemy URL, e.g. ``sqlite:///paytracker.db``.
        echo: Log every SQL statement.
    """
    global _engine, _session_factory

    reset_engine()
    _engine = create_engine(database_url, **_engine_options(database_url, echo))
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name})
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _session_factory


@contextmanager
def session_scope(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    One transaction: commit on normal exit, roll back and re-raise on error.

    Usage:
        with session_scope(factory) as session:
            session.add(LedgerSlot(name="employers", payload="[]"))
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create the slot table if it does not exist yet."""
    Base.metadata.create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every table. Tests only."""
    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
