"""
paytracker_engines.tracer -- PAYTRACKER_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine method and, after it returns,
    logs which engine ran (name and version), a fingerprint of the selected
    keyword inputs, and how long it took.  Replaying the same inputs gives
    the same fingerprint, which makes two runs easy to correlate in logs.

Architecture position:
    Engines -- support code for the calculation layer.  Emits a log record
    and nothing else; inputs and results pass through untouched.

Failure modes:
    - A fingerprint field passed positionally (or not at all) hashes as
      "null".  Engine methods therefore take their inputs keyword-only.
    - If the wrapped call raises, no trace is written.
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from paytracker_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    match value:
        case None:
            return "null"
        case Enum():
            return str(value.value)
        case str():
            return value
        case bool() | int() | float() | Decimal():
            return str(value)
        case date():
            return value.isoformat()
        case Mapping():
            inner = ",".join(f"{k}:{_canonical(v)}" for k, v in sorted(value.items()))
            return "{" + inner + "}"
        case list() | tuple():
            return "[" + ",".join(_canonical(v) for v in value) + "]"
        case _:
            return repr(value)


def compute_input_fingerprint(fields: tuple[str, ...], kwargs: Mapping[str, Any]) -> str:
    """SHA-256 over ``name=value`` pairs of the selected inputs, first 16 hex chars."""
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entrypoint so that each call logs PAYTRACKER_ENGINE_TRACE."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            _logger.info(
                "PAYTRACKER_ENGINE_TRACE",
                extra={
                    "trace_type": "PAYTRACKER_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "function": func.__qualname__,
                    "input_fingerprint": (
                        compute_input_fingerprint(fingerprint_fields, kwargs)
                        if fingerprint_fields
                        else ""
                    ),
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return result

        return wrapper

    return decorator
