"""
LedgerSnapshot -- an immutable view of all three record collections.

Responsibility:
    Bundles employers, work entries and payments into one frozen value so
    that every reconciliation operation reads a consistent snapshot and
    returns a complete replacement.  Insertion order of each collection is
    preserved; FIFO tie-breaking depends on it.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    (none directly -- referential integrity is kept by the ledger service's
    cascade rules, and lookups here tolerate dangling references)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from paytracker_kernel.domain.records import Employer, Payment, WorkEntry


@dataclass(frozen=True)
class LedgerSnapshot:
    """Employers, work entries and payments at one point in time."""

    employers: tuple[Employer, ...] = field(default_factory=tuple)
    work_entries: tuple[WorkEntry, ...] = field(default_factory=tuple)
    payments: tuple[Payment, ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls,
        employers: Iterable[Employer] = (),
        work_entries: Iterable[WorkEntry] = (),
        payments: Iterable[Payment] = (),
    ) -> LedgerSnapshot:
        return cls(tuple(employers), tuple(work_entries), tuple(payments))

    def find_employer(self, employer_id: str) -> Employer | None:
        return next((e for e in self.employers if e.id == employer_id), None)

    def find_work_entry(self, work_entry_id: str) -> WorkEntry | None:
        return next((w for w in self.work_entries if w.id == work_entry_id), None)

    def entries_for(self, employer_id: str) -> tuple[WorkEntry, ...]:
        """Work entries of one employer, in insertion order."""
        return tuple(w for w in self.work_entries if w.employer_id == employer_id)

    def payments_for(self, work_entry_id: str) -> tuple[Payment, ...]:
        return tuple(p for p in self.payments if p.work_entry_id == work_entry_id)

    def with_changes(
        self,
        *,
        employers: Iterable[Employer] | None = None,
        work_entries: Iterable[WorkEntry] | None = None,
        payments: Iterable[Payment] | None = None,
    ) -> LedgerSnapshot:
        """Whole-collection replacement of any subset of the collections."""
        changes = {}
        if employers is not None:
            changes["employers"] = tuple(employers)
        if work_entries is not None:
            changes["work_entries"] = tuple(work_entries)
        if payments is not None:
            changes["payments"] = tuple(payments)
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return not (self.employers or self.work_entries or self.payments)
