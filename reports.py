from datetime import datetime
from typing import Any, Dict, List, Optional

from book import Book
from catalog import Catalog
from ledger import PenaltyLedger
from loan import Loan
from loans import LoanManager
from member import Member
from membership import Membership
from popularity import PopularityTracker


class ReportingQueries:
    """Read-only views across the circulation stores. Nothing here mutates state."""

    def __init__(self, catalog: Catalog, membership: Membership, ledger: PenaltyLedger,
                 popularity: PopularityTracker, loans: LoanManager) -> None:
        self._catalog = catalog
        self._membership = membership
        self._ledger = ledger
        self._popularity = popularity
        self._loans = loans

    def loans_of(self, member_id: str) -> List[Loan]:
        return [l for l in self._loans.loans() if l.member_id == member_id]

    def open_loans(self) -> List[Loan]:
        return [l for l in self._loans.loans() if l.is_open]

    def overdue_loans(self, now: Optional[datetime] = None) -> List[Loan]:
        """Open loans kept longer than the loan period. No fee is charged here."""
        now = now or self._loans.now()
        return [l for l in self.open_loans() if self._loans.is_overdue(l, now)]

    def available_books(self) -> List[Book]:
        on_loan = {l.isbn for l in self.open_loans()}
        return [b for b in self._catalog.list_books() if b.isbn not in on_loan]

    def never_borrowed_books(self) -> List[Book]:
        return self._popularity.never_borrowed(self._catalog.list_books())

    def members_without_penalty(self) -> List[Member]:
        return [m for m in self._membership.list_members()
                if not self._ledger.has_penalty(m.member_id)]

    def members_with_penalty(self) -> List[Member]:
        return [m for m in self._membership.list_members()
                if self._ledger.has_penalty(m.member_id)]

    def top_borrowed(self, n: int) -> List[Book]:
        return self._popularity.top_n(self._catalog.list_books(), n)

    def summary(self, top: int = 5) -> Dict[str, Any]:
        """Ranking, pending penalties and totals in one snapshot."""
        return {
            "top_borrowed": [
                {"isbn": b.isbn, "title": b.title, "times_borrowed": self._popularity.count_of(b.isbn)}
                for b in self.top_borrowed(top)
            ],
            "members_with_penalty": [
                {"member_id": m.member_id, "name": m.name, "penalty": self._ledger.penalty_of(m.member_id)}
                for m in self.members_with_penalty()
            ],
            "total_members": len(self._membership),
            "total_books": len(self._catalog),
        }
