"""
Loyalty Ledger Port

The booking engine pays from, refunds to and credits cashback on a
prepaid loyalty card. It only needs the operations below; every call is
expected to be atomic on its own. ``DjangoLoyaltyLedger`` in
``apps.loyalty.services`` is the production implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from apps.loyalty.domain.tiers import MembershipTier
from shared.domain.value_objects import Money


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of a ledger movement"""
    new_balance: Money


class AbstractLoyaltyLedger(ABC):
    """Balance and cashback operations on a user's loyalty card"""

    @abstractmethod
    def get_balance(self, user_id: str) -> Money:
        raise NotImplementedError

    @abstractmethod
    def get_tier(self, user_id: str) -> MembershipTier:
        raise NotImplementedError

    @abstractmethod
    def debit(self, user_id: str, amount: Money, reason: str, booking_id=None) -> LedgerResult:
        """
        Take money from the balance

        Raises:
            InsufficientFundsError: balance is lower than amount; nothing changes
        """
        raise NotImplementedError

    @abstractmethod
    def credit(self, user_id: str, amount: Money, reason: str, booking_id=None) -> LedgerResult:
        raise NotImplementedError

    @abstractmethod
    def credit_cashback(self, user_id: str, amount: Money, booking_id=None) -> LedgerResult:
        """Add cashback to the balance and to lifetime earned cashback"""
        raise NotImplementedError

    @abstractmethod
    def debit_cashback(self, user_id: str, amount: Money, booking_id=None) -> LedgerResult:
        """Claw back cashback from the balance and from lifetime earned cashback"""
        raise NotImplementedError
