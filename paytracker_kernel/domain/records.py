"""
Ledger Records (``paytracker_kernel.domain.records``).

Responsibility
--------------
Frozen dataclass value objects for the three record collections of the
ledger: employers, work entries and payments, plus the enums describing a
work entry's rate type and payment status.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Engines read
these records, services create them, the store persists their dict form.

Invariants enforced
-------------------
* All records are ``frozen=True``; a changed record is a new record.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``hours`` is present iff the rate type is hourly.
* ``rate``, ``hours`` and payment ``amount`` are strictly positive.

Failure modes
-------------
* Construction with a missing or non-positive required field raises
  ``ValidationError``.
* ``from_dict`` on a dict lacking a required key raises ``ValidationError``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from paytracker_kernel.exceptions import ValidationError


class RateType(str, Enum):
    """How a work entry is billed."""

    HOURLY = "hourly"
    FIXED = "fixed"


class WorkStatus(str, Enum):
    """Payment status of a work entry, derived from its payments."""

    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def to_decimal(value: Any, field: str) -> Decimal:
    """
    Coerce a numeric input to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        ValidationError: if ``value`` is missing, boolean or not numeric.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(field, "a number is required")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(field, f"not a number: {value!r}") from None
    if not result.is_finite():
        raise ValidationError(field, f"not a finite number: {value!r}")
    return result


def to_date(value: Any, field: str) -> date:
    """Coerce a ``date``, ``datetime`` or ISO ``YYYY-MM-DD`` string to ``date``.

    A ``datetime`` is truncated to its calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            raise ValidationError(field, f"not an ISO date: {value!r}") from None
    raise ValidationError(field, "a date is required")


def _is_calendar_date(value: Any) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "is required")
    return value


def _require(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValidationError(key, "is required") from None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Employer:
    """A counterparty who owes money for logged work."""

    id: str
    name: str
    contact: str | None = None

    def __post_init__(self) -> None:
        _require_text(self.id, "id")
        _require_text(self.name, "name")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.contact is not None:
            data["contact"] = self.contact
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Employer:
        return cls(
            id=_require(data, "id"),
            name=_require(data, "name"),
            contact=data.get("contact"),
        )


@dataclass(frozen=True)
class WorkEntry:
    """
    A unit of billable work.

    Contract:
        ``status`` is a cached projection of the entry's payments.  Only the
        reconcile step of the ledger service writes it after creation.
    Guarantees:
        - ``rate`` > 0.
        - Hourly entries carry ``hours`` > 0; fixed entries carry none.
    Non-goals:
        - Does not check that ``employer_id`` references a live employer.
    """

    id: str
    employer_id: str
    description: str
    date: date
    rate: Decimal
    rate_type: RateType
    hours: Decimal | None = None
    status: WorkStatus = WorkStatus.PENDING

    def __post_init__(self) -> None:
        _require_text(self.id, "id")
        _require_text(self.employer_id, "employer_id")
        _require_text(self.description, "description")
        if not _is_calendar_date(self.date):
            raise ValidationError("date", "a calendar date without a time is required")
        if not isinstance(self.rate_type, RateType):
            raise ValidationError("rate_type", f"unknown rate type {self.rate_type!r}")
        if not isinstance(self.status, WorkStatus):
            raise ValidationError("status", f"unknown status {self.status!r}")
        if not isinstance(self.rate, Decimal) or self.rate <= Decimal("0"):
            raise ValidationError("rate", "must be a positive Decimal")
        if self.rate_type is RateType.HOURLY:
            if not isinstance(self.hours, Decimal) or self.hours <= Decimal("0"):
                raise ValidationError("hours", "hourly work requires positive hours")
        elif self.hours is not None:
            raise ValidationError("hours", "fixed-rate work must not carry hours")

    def with_status(self, status: WorkStatus) -> WorkEntry:
        """Copy of this entry carrying a new cached status."""
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "employerId": self.employer_id,
            "description": self.description,
            "date": self.date.isoformat(),
            "rate": self.rate,
            "rateType": self.rate_type.value,
        }
        if self.hours is not None:
            data["hours"] = self.hours
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkEntry:
        rate_type = _require(data, "rateType")
        status = data.get("status", WorkStatus.PENDING.value)
        try:
            rate_type = RateType(rate_type)
            status = WorkStatus(status)
        except ValueError as exc:
            raise ValidationError("rateType/status", str(exc)) from None
        hours = data.get("hours")
        return cls(
            id=_require(data, "id"),
            employer_id=_require(data, "employerId"),
            description=_require(data, "description"),
            date=to_date(_require(data, "date"), "date"),
            rate=to_decimal(_require(data, "rate"), "rate"),
            rate_type=rate_type,
            hours=to_decimal(hours, "hours") if hours is not None else None,
            status=status,
        )


@dataclass(frozen=True)
class Payment:
    """A monetary record applied against exactly one work entry."""

    id: str
    work_entry_id: str
    amount: Decimal
    date: date

    def __post_init__(self) -> None:
        _require_text(self.id, "id")
        _require_text(self.work_entry_id, "work_entry_id")
        if not isinstance(self.amount, Decimal) or self.amount <= Decimal("0"):
            raise ValidationError("amount", "must be a positive Decimal")
        if not _is_calendar_date(self.date):
            raise ValidationError("date", "a calendar date without a time is required")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "workEntryId": self.work_entry_id,
            "amount": self.amount,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Payment:
        return cls(
            id=_require(data, "id"),
            work_entry_id=_require(data, "workEntryId"),
            amount=to_decimal(_require(data, "amount"), "amount"),
            date=to_date(_require(data, "date"), "date"),
        )
