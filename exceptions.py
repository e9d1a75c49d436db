"""Error taxonomy for circulation operations.

All of these are recoverable outcomes reported to the caller.
"""

from decimal import Decimal


class CirculationError(Exception):
    """Base class for circulation desk errors."""


class NotFoundError(CirculationError, LookupError):
    """Unknown ISBN or member id."""


class UnavailableError(CirculationError):
    """The book is currently on loan."""

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with ISBN {isbn} is currently on loan.")
        self.isbn = isbn


class PenaltyOutstandingError(CirculationError):
    """The member owes an unpaid fine."""

    def __init__(self, member_id: str, amount: Decimal) -> None:
        super().__init__(f"Member {member_id} has an outstanding penalty of {amount}.")
        self.member_id = member_id
        self.amount = amount


class NoMatchingOpenLoanError(CirculationError):
    """A return was requested for a loan that is not open."""


class InsufficientPaymentError(CirculationError):
    """Settlement amount is less than the amount owed."""


class DuplicateEntryError(CirculationError, ValueError):
    """A book or member with the same identifier already exists."""
