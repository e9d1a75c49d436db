"""Loan lifecycle: borrow and return.

The manager owns every Loan ever created. Availability of a book is not
stored anywhere; it is derived by scanning the open loans.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from catalog import Catalog
from config import Settings, settings as default_settings
from exceptions import (
    NoMatchingOpenLoanError,
    NotFoundError,
    PenaltyOutstandingError,
    UnavailableError,
)
from ledger import PenaltyLedger, ZERO
from loan import Loan
from membership import Membership
from popularity import PopularityTracker

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ONE_DAY = timedelta(days=1)


def elapsed_days(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded down."""
    return (end - start) // ONE_DAY


class LoanManager:
    def __init__(self, catalog: Catalog, membership: Membership, ledger: PenaltyLedger,
                 popularity: PopularityTracker, *, settings: Optional[Settings] = None,
                 clock: Optional[Clock] = None) -> None:
        self._catalog = catalog
        self._membership = membership
        self._ledger = ledger
        self._popularity = popularity
        self._settings = settings or default_settings
        self._clock: Clock = clock or datetime.now
        self._loans: List[Loan] = []

    def now(self) -> datetime:
        return self._clock()

    def loans(self) -> List[Loan]:
        return list(self._loans)

    def open_loan_for(self, isbn: str) -> Optional[Loan]:
        for loan in self._loans:
            if loan.is_open and loan.isbn == isbn:
                return loan
        return None

    def is_available(self, isbn: str) -> bool:
        return self.open_loan_for(isbn) is None

    def is_overdue(self, loan: Loan, now: Optional[datetime] = None) -> bool:
        """True for an open loan kept longer than the loan period."""
        if not loan.is_open:
            return False
        return elapsed_days(loan.borrowed_at, now or self.now()) > self._settings.loan_period_days

    def late_fee(self, days: int) -> Decimal:
        """Fine owed for a loan kept ``days`` whole days."""
        overdue = days - self._settings.loan_period_days
        if overdue <= 0:
            return ZERO
        return overdue * self._settings.daily_fine

    def borrow(self, member_id: str, isbn: str) -> Loan:
        """Lend a book to a member.

        Raises NotFoundError, UnavailableError or PenaltyOutstandingError;
        nothing is changed unless every check passes.
        """
        member = self._membership.find_by_id(member_id)
        if member is None:
            raise NotFoundError(f"Member with ID {member_id} not found.")
        book = self._catalog.find_by_isbn(isbn)
        if book is None:
            raise NotFoundError(f"Book with ISBN {isbn} not found.")

        owed = self._ledger.penalty_of(member.member_id)
        if owed > ZERO:
            logger.warning("Borrow refused: %s owes %s", member.member_id, owed)
            raise PenaltyOutstandingError(member.member_id, owed)

        if not self.is_available(book.isbn):
            logger.warning("Borrow refused: %s is on loan", book.isbn)
            raise UnavailableError(book.isbn)

        loan = Loan(member_id=member.member_id, isbn=book.isbn, borrowed_at=self.now())
        self._loans.append(loan)
        self._popularity.increment(book.isbn)
        logger.info("Loan #%d: %s borrowed %s", loan.loan_id, member.member_id, book.isbn)
        return loan

    def close(self, member_id: str, isbn: str) -> Loan:
        """Close the member's open loan for ``isbn``, charge any late fee and return the loan.

        Raises NoMatchingOpenLoanError when no matching open loan exists.
        """
        loan = next(
            (l for l in self._loans if l.is_open and l.member_id == member_id and l.isbn == isbn),
            None,
        )
        if loan is None:
            logger.debug("No open loan for member %s and ISBN %s", member_id, isbn)
            raise NoMatchingOpenLoanError(f"No open loan for member {member_id} and ISBN {isbn}.")

        returned_at = self.now()
        fee = self.late_fee(elapsed_days(loan.borrowed_at, returned_at))
        loan.mark_returned(returned_at)
        loan.fine = fee
        if fee > ZERO:
            self._ledger.add_fine(member_id, fee)
        logger.info("Loan #%d returned by %s (fine %s)", loan.loan_id, member_id, fee)
        return loan

    def return_loan(self, member_id: str, isbn: str) -> bool:
        """Like ``close`` but reports a missing open loan as False."""
        try:
            self.close(member_id, isbn)
        except NoMatchingOpenLoanError:
            return False
        return True
