# spinbot/core/errors.py
from __future__ import annotations


class SpinbotError(Exception):
    """Base class for reward engine errors."""


class ContractViolation(SpinbotError):
    """
    Caller broke a precondition (malformed catalog, spin without allowance, ...).
    Not recoverable by retrying the same call.
    """


class NoSpinsLeft(ContractViolation):
    def __init__(self) -> None:
        super().__init__("No free spins remaining; gate the spin before drawing a prize")


class InsufficientFunds(SpinbotError):
    """Withdrawal larger than the balance. State is left untouched."""

    def __init__(self, *, balance: int, amount: int) -> None:
        self.balance = balance
        self.amount = amount
        super().__init__(f"Insufficient funds: balance={balance}, requested={amount}")
