"""Loyalty ledger errors."""

from shared.domain.exceptions import DomainError


class InsufficientFundsError(DomainError):
    """Insufficient loyalty-card balance"""

    code = 'insufficient_funds'

    def __init__(self, message: str = '', *, balance, required):
        super().__init__(
            message or f"Insufficient balance: {balance}, required: {required}",
            balance=str(balance),
            required=str(required),
            deficit=str(required - balance),
        )
        self.balance = balance
        self.required = required
