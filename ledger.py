import logging
from decimal import Decimal
from typing import Dict, Union

from exceptions import InsufficientPaymentError, NotFoundError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

Amount = Union[Decimal, float, int, str]


def to_amount(value: Amount) -> Decimal:
    """Coerce a monetary value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class PenaltyLedger:
    """Outstanding fines keyed by member id.

    Only members with an open account (see ``open_account``) can carry a
    balance. Unknown or removed members always read as owing nothing.
    """

    def __init__(self) -> None:
        self._balances: Dict[str, Decimal] = {}

    def open_account(self, member_id: str) -> None:
        self._balances[member_id] = ZERO

    def close_account(self, member_id: str) -> None:
        self._balances.pop(member_id, None)

    def has_account(self, member_id: str) -> bool:
        return member_id in self._balances

    def penalty_of(self, member_id: str) -> Decimal:
        return self._balances.get(member_id, ZERO)

    def has_penalty(self, member_id: str) -> bool:
        return self.penalty_of(member_id) > ZERO

    def add_fine(self, member_id: str, amount: Amount) -> bool:
        """Accumulate a fine. Returns False when the member has no account."""
        amount = to_amount(amount)
        if amount < ZERO:
            raise ValueError("Fine amount cannot be negative.")
        if member_id not in self._balances:
            logger.debug("No ledger account for %s, fine of %s not recorded", member_id, amount)
            return False
        self._balances[member_id] += amount
        logger.info("Fined %s %s (now owes %s)", member_id, amount, self._balances[member_id])
        return True

    def pay(self, member_id: str, payment: Amount) -> Decimal:
        """Clear the whole balance and return the amount cleared.

        Raises NotFoundError for members without an account and
        InsufficientPaymentError when ``payment`` does not cover the balance.
        Partial payments are never applied.
        """
        if member_id not in self._balances:
            raise NotFoundError(f"Member with ID {member_id} not found.")
        payment = to_amount(payment)
        owed = self._balances[member_id]
        if payment < owed:
            logger.warning("Rejected payment of %s from %s (owes %s)", payment, member_id, owed)
            raise InsufficientPaymentError(f"Payment of {payment} does not cover {owed}.")
        self._balances[member_id] = ZERO
        logger.info("Member %s settled %s", member_id, owed)
        return owed

    def settle(self, member_id: str, payment: Amount) -> bool:
        """Clear the balance if ``payment`` covers it. Partial payments are rejected."""
        try:
            self.pay(member_id, payment)
        except (NotFoundError, InsufficientPaymentError):
            return False
        return True
