"""
Module: paytracker_kernel.db.base
Responsibility: Declarative base shared by the ORM models of the slot
    store, with the column types used for annotated attributes.
Architecture position: Kernel > DB.  Imported by db/models.py and
    db/engine.py; imports nothing from the rest of the package.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase

# Slot payloads hold a whole serialized collection.
LongText = Text


class Base(DeclarativeBase):
    """Timestamps are stored timezone-aware; plain strings default to 255 chars."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        str: String(255),
    }
