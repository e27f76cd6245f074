"""
Typed Exception Hierarchy for the income ledger.

Every error raised by the ledger carries a ``code`` class attribute
(machine-readable, stable across message wording changes) and keeps its
context as structured attributes instead of inside the message string.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayTrackerError (base)
    |
    +-- ValidationError
    |   +-- InvalidPaymentAmountError
    |   +-- PaymentExceedsOutstandingError
    |
    +-- NoOutstandingWorkError
    |
    +-- RecordNotFoundError
    |   +-- EmployerNotFoundError
    |   +-- WorkEntryNotFoundError
    |
    +-- InterchangeFormatError
    |
    +-- StoreError
    |   +-- StoreCorruptionError
    |
    +-- ConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                         | When Raised
----------------|------------------------------|-------------------------------------
Validation      | VALIDATION_ERROR             | Required field missing / not positive
                | INVALID_PAYMENT_AMOUNT       | Payment amount <= 0
                | PAYMENT_EXCEEDS_OUTSTANDING  | Manual payment above outstanding
----------------|------------------------------|-------------------------------------
Allocation      | NO_OUTSTANDING_WORK          | FIFO found nothing to pay (no-op)
----------------|------------------------------|-------------------------------------
Lookup          | EMPLOYER_NOT_FOUND           | Employer id doesn't exist
                | WORK_ENTRY_NOT_FOUND         | Work entry id doesn't exist
----------------|------------------------------|-------------------------------------
Interchange     | INTERCHANGE_FORMAT_ERROR     | Import document malformed
----------------|------------------------------|-------------------------------------
Store           | STORE_CORRUPTION             | Persisted slot can't be decoded
----------------|------------------------------|-------------------------------------
Config          | CONFIG_ERROR                 | Invalid configuration file

===============================================================================
HANDLING PATTERNS
===============================================================================

NoOutstandingWorkError is deliberately NOT a ValidationError: the inputs
were well-formed, there was simply nothing to pay.

    try:
        outcome = ledger.allocate_fifo(employer_id, amount, today)
    except NoOutstandingWorkError:
        notify("No outstanding work entries found for this employer.")
    except ValidationError as e:
        notify(f"{e.code}: {e}")

None of these errors are fatal; every failure is local to the single
operation that raised it and leaves stored state untouched.
"""

from datetime import date
from decimal import Decimal


class PayTrackerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYTRACKER_ERROR"


# Validation exceptions


class ValidationError(PayTrackerError):
    """Caller-correctable input error; no state was mutated."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidPaymentAmountError(ValidationError):
    """Payment amount is zero or negative."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__("amount", f"payment must be positive, got {amount}")


class PaymentExceedsOutstandingError(ValidationError):
    """Manual payment is larger than what is still owed on the entry."""

    code: str = "PAYMENT_EXCEEDS_OUTSTANDING"

    def __init__(self, work_entry_id: str, amount: Decimal, outstanding: Decimal):
        self.work_entry_id = work_entry_id
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            "amount",
            f"payment of {amount} exceeds outstanding balance {outstanding} "
            f"on work entry {work_entry_id}",
        )


# Allocation outcomes


class NoOutstandingWorkError(PayTrackerError):
    """FIFO allocation found no eligible outstanding work for the employer."""

    code: str = "NO_OUTSTANDING_WORK"

    def __init__(self, employer_id: str, amount: Decimal, payment_date: date):
        self.employer_id = employer_id
        self.amount = amount
        self.payment_date = payment_date
        super().__init__(
            f"No outstanding work entries found for employer {employer_id}"
        )


# Lookup exceptions


class RecordNotFoundError(PayTrackerError):
    """Base exception for missing records."""

    code: str = "RECORD_NOT_FOUND"


class EmployerNotFoundError(RecordNotFoundError):
    """Employer with given ID was not found."""

    code: str = "EMPLOYER_NOT_FOUND"

    def __init__(self, employer_id: str):
        self.employer_id = employer_id
        super().__init__(f"Employer not found: {employer_id}")


class WorkEntryNotFoundError(RecordNotFoundError):
    """Work entry with given ID was not found."""

    code: str = "WORK_ENTRY_NOT_FOUND"

    def __init__(self, work_entry_id: str):
        self.work_entry_id = work_entry_id
        super().__init__(f"Work entry not found: {work_entry_id}")


# Interchange exceptions


class InterchangeFormatError(PayTrackerError):
    """Bulk import document is not a valid ledger export."""

    code: str = "INTERCHANGE_FORMAT_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid data format: {reason}")


# Store exceptions


class StoreError(PayTrackerError):
    """Base exception for persistence errors."""

    code: str = "STORE_ERROR"


class StoreCorruptionError(StoreError):
    """A persisted slot holds a value that cannot be decoded."""

    code: str = "STORE_CORRUPTION"

    def __init__(self, slot: str, reason: str):
        self.slot = slot
        self.reason = reason
        super().__init__(f"Slot {slot!r} is corrupt: {reason}")


# Configuration exceptions


class ConfigError(PayTrackerError):
    """Configuration file is missing values or holds invalid ones."""

    code: str = "CONFIG_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key!r}: {reason}")
