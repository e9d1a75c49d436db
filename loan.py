"""Loan records for the circulation desk.

A loan links one member to one book by identifier.  It is created OPEN by a
successful borrow and moves to RETURNED exactly once; it is never reopened or
deleted.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class LoanStatus(str, Enum):
    OPEN = "OPEN"
    RETURNED = "RETURNED"


_loan_ids = itertools.count(1)


@dataclass
class Loan:
    """Represents a borrowing event between a member and a book."""
    member_id: str
    isbn: str
    borrowed_at: datetime
    returned_at: Optional[datetime] = None
    fine: Decimal = Decimal("0")
    loan_id: int = field(default_factory=lambda: next(_loan_ids))

    @property
    def status(self) -> LoanStatus:
        """OPEN until a return timestamp is set, RETURNED afterwards."""
        return LoanStatus.RETURNED if self.returned_at is not None else LoanStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self.returned_at is None

    def mark_returned(self, when: datetime) -> None:
        if self.returned_at is not None:
            raise RuntimeError(f"Loan {self.loan_id} was already returned.")
        self.returned_at = when

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        returned = self.returned_at.isoformat() if self.returned_at else "-"
        return (f"Loan #{self.loan_id}: member {self.member_id} / ISBN {self.isbn} "
                f"borrowed {self.borrowed_at.isoformat()} returned {returned} [{self.status.value}]")

    def to_dict(self) -> dict:
        return {
            "loan_id": self.loan_id,
            "member_id": self.member_id,
            "isbn": self.isbn,
            "borrowed_at": self.borrowed_at.isoformat(),
            "returned_at": self.returned_at.isoformat() if self.returned_at else None,
            "status": self.status.value,
            "fine": str(self.fine),
        }
