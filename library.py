from datetime import datetime
from decimal import Decimal
from functools import wraps
from threading import RLock
from typing import Any, Dict, List, Optional

from book import Book
from catalog import Catalog
from config import Settings, settings as default_settings
from ledger import Amount, PenaltyLedger
from loan import Loan
from loans import Clock, LoanManager
from member import Member
from membership import Membership
from popularity import PopularityTracker
from reports import ReportingQueries


def synchronized(method):
    """Run the method while holding the engine lock."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class Library:
    """The circulation desk engine: catalog, members, loans, fines and reports.

    Each instance is independent; nothing is shared at module level. All
    public operations run under one re-entrant lock so a borrow's
    check-then-act sequence cannot interleave with another mutation.
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> None:
        self.settings = settings or default_settings
        self.lock = RLock()

        self.popularity = PopularityTracker()
        self.ledger = PenaltyLedger()
        self.catalog = Catalog(self.popularity)
        self.membership = Membership(self.ledger)
        self.loans = LoanManager(self.catalog, self.membership, self.ledger, self.popularity,
                                 settings=self.settings, clock=clock)
        self.reports = ReportingQueries(self.catalog, self.membership, self.ledger,
                                        self.popularity, self.loans)

    # ------------------------- Books ------------------------- #
    @synchronized
    def add_book(self, book: Book) -> None:
        self.catalog.add(book)

    @synchronized
    def remove_book(self, isbn: str) -> bool:
        return self.catalog.remove(isbn)

    @synchronized
    def find_book(self, isbn: str) -> Optional[Book]:
        return self.catalog.find_by_isbn(isbn)

    @synchronized
    def list_books(self) -> List[Book]:
        return self.catalog.list_books()

    @synchronized
    def search_books_by_title(self, text: str) -> List[Book]:
        return self.catalog.search_by_title(text)

    @synchronized
    def search_books_by_author(self, text: str) -> List[Book]:
        return self.catalog.search_by_author(text)

    @synchronized
    def is_available(self, isbn: str) -> bool:
        return self.loans.is_available(isbn)

    @synchronized
    def times_borrowed(self, isbn: str) -> int:
        return self.popularity.count_of(isbn)

    # ------------------------- Members ------------------------- #
    @synchronized
    def add_member(self, member: Member) -> None:
        self.membership.add(member)

    @synchronized
    def remove_member(self, member_id: str) -> bool:
        return self.membership.remove(member_id)

    @synchronized
    def find_member(self, member_id: str) -> Optional[Member]:
        return self.membership.find_by_id(member_id)

    @synchronized
    def list_members(self) -> List[Member]:
        return self.membership.list_members()

    @synchronized
    def search_members(self, text: str) -> List[Member]:
        return self.membership.search_by_name(text)

    # ------------------------- Circulation ------------------------- #
    @synchronized
    def borrow(self, member_id: str, isbn: str) -> Loan:
        return self.loans.borrow(member_id, isbn)

    @synchronized
    def return_loan(self, member_id: str, isbn: str) -> bool:
        return self.loans.return_loan(member_id, isbn)

    @synchronized
    def close_loan(self, member_id: str, isbn: str) -> Loan:
        return self.loans.close(member_id, isbn)

    @synchronized
    def penalty_of(self, member_id: str) -> Decimal:
        return self.ledger.penalty_of(member_id)

    @synchronized
    def settle(self, member_id: str, amount: Amount) -> bool:
        return self.ledger.settle(member_id, amount)

    @synchronized
    def pay(self, member_id: str, amount: Amount) -> Decimal:
        return self.ledger.pay(member_id, amount)

    # ------------------------- Reports ------------------------- #
    @synchronized
    def loans_of(self, member_id: str) -> List[Loan]:
        return self.reports.loans_of(member_id)

    @synchronized
    def open_loans(self) -> List[Loan]:
        return self.reports.open_loans()

    @synchronized
    def overdue_loans(self, now: Optional[datetime] = None) -> List[Loan]:
        return self.reports.overdue_loans(now)

    @synchronized
    def available_books(self) -> List[Book]:
        return self.reports.available_books()

    @synchronized
    def never_borrowed_books(self) -> List[Book]:
        return self.reports.never_borrowed_books()

    @synchronized
    def members_without_penalty(self) -> List[Member]:
        return self.reports.members_without_penalty()

    @synchronized
    def members_with_penalty(self) -> List[Member]:
        return self.reports.members_with_penalty()

    @synchronized
    def top_borrowed(self, n: int) -> List[Book]:
        return self.reports.top_borrowed(n)

    @synchronized
    def summary(self, top: Optional[int] = None) -> Dict[str, Any]:
        return self.reports.summary(self.settings.summary_top_n if top is None else top)
