"""
Module: paytracker_kernel.db.models
Responsibility: ORM persistence for the named slots of the key-value
    persistence contract.  One row per slot; the payload column holds the
    slot's collection encoded as a JSON array.
Architecture position: Kernel > DB.  May import from db/base.py only.

Invariants enforced:
    - Slot name is the primary key: a slot has at most one value.
    - A write replaces the whole payload (collection-replacement semantics).
"""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from paytracker_kernel.db.base import Base, LongText


class LedgerSlot(Base):
    """A named slot holding one serialized record collection."""

    __tablename__ = "ledger_slots"

    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[str] = mapped_column(LongText, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<LedgerSlot {self.name} ({len(self.payload)} bytes)>"
