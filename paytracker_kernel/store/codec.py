"""
JSON codec shared by the slot store and the bulk interchange document.

Monetary values are ``Decimal`` in memory and JSON numbers on disk.
Integral amounts are written as integers and fractions as floats, but only
when the float's shortest repr reads back to the same ``Decimal``.  Anything
finer is written as its decimal string, which ``to_decimal`` accepts on the
way back in.  Reading parses every non-integer number into ``Decimal``.
"""

import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


def _encode_decimal(value: Decimal) -> int | float | str:
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


class _LedgerEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return _encode_decimal(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def dumps(value: Any, *, indent: int | None = None) -> str:
    return json.dumps(value, cls=_LedgerEncoder, indent=indent)


def loads(text: str) -> Any:
    """Parse JSON text; raises ``json.JSONDecodeError`` on malformed input."""
    return json.loads(text, parse_float=Decimal)
