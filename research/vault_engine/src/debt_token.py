"""
Debt token model.

Balance ledger of the pegged debt asset. Issuance and destruction are gated by
the MINTER and BURNER roles of a PermissionSet; the vault ledger holds both.
"""
import logging
from typing import Dict

from .access import PermissionSet, Role
from .errors import InputValidationError, InsufficientBalanceError

logger = logging.getLogger(__name__)


class DebtToken:
    """
    Simulates the stablecoin contract minted against vault collateral.
    """

    def __init__(self, permissions: PermissionSet = None, symbol: str = "USD"):
        self.symbol = symbol
        self.permissions = permissions or PermissionSet()

        # Total token supply
        self.total_supply = 0

        # Mapping of accounts to token balances
        self.balances: Dict[str, int] = {}

    def balance_of(self, account: str) -> int:
        """Returns the token balance of the given account."""
        return self.balances.get(account, 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfers tokens from sender to recipient.

        Raises:
            InputValidationError: amount is zero
            InsufficientBalanceError: sender holds less than amount
        """
        if amount <= 0:
            raise InputValidationError("Amount must be > 0")

        sender_balance = self.balance_of(sender)
        if sender_balance < amount:
            raise InsufficientBalanceError("Insufficient token balance")

        self.balances[sender] = sender_balance - amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        return True

    def mint(self, caller: str, recipient: str, amount: int) -> bool:
        """
        Mints new tokens to the recipient account.
        Only callable by accounts holding the MINTER role.
        """
        self.permissions.require(Role.MINTER, caller)
        if amount <= 0:
            raise InputValidationError("Amount must be > 0")

        self.balances[recipient] = self.balance_of(recipient) + amount
        self.total_supply += amount
        logger.debug("Minted %s %s to %s", amount, self.symbol, recipient)
        return True

    def burn(self, caller: str, from_account: str, amount: int) -> bool:
        """
        Burns tokens from the given account.
        Only callable by accounts holding the BURNER role.
        """
        self.permissions.require(Role.BURNER, caller)
        if amount <= 0:
            raise InputValidationError("Amount must be > 0")

        from_balance = self.balance_of(from_account)
        if from_balance < amount:
            raise InsufficientBalanceError("Insufficient token balance")

        self.balances[from_account] = from_balance - amount
        self.total_supply -= amount
        logger.debug("Burned %s %s from %s", amount, self.symbol, from_account)
        return True
