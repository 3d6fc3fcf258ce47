"""Custody of the native collateral asset"""
import logging
from typing import Dict

from .errors import InputValidationError, InsufficientBalanceError

logger = logging.getLogger(__name__)


class NativeAsset:
    """
    Tracks collateral held by the engine and collateral paid out of it.

    Deposits arrive with the call, so receive() only books them into custody.
    pay() releases custody and credits the recipient.
    """

    def __init__(self):
        self.custody = 0
        self.balances: Dict[str, int] = {}

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def receive(self, sender: str, amount: int) -> None:
        if amount <= 0:
            raise InputValidationError("Amount must be > 0")
        self.custody += amount

    def pay(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise InputValidationError("Amount must be > 0")
        if amount > self.custody:
            raise InsufficientBalanceError(f"Custody holds {self.custody}, cannot pay {amount}")
        self.custody -= amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        logger.debug("Paid %s collateral to %s", amount, recipient)
