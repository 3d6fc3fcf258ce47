"""Vault state management"""
from dataclasses import dataclass
from enum import Enum


class VaultStatus(Enum):
    IDLE = "idle"
    ACTIVE_STANDARD = "active_standard"
    ACTIVE_ZERO_LIQUIDATION = "active_zero_liquidation"


@dataclass
class Vault:
    """Represents a CDP keyed by its owner"""
    owner: str
    collateral_amount: int = 0  # native units, 18 decimals
    debt_principal: int = 0  # debt units, 18 decimals, includes accrued interest
    zero_liquidation: bool = False
    last_accrual_time: int = 0

    @property
    def status(self) -> VaultStatus:
        if self.collateral_amount == 0 and self.debt_principal == 0:
            return VaultStatus.IDLE
        if self.zero_liquidation:
            return VaultStatus.ACTIVE_ZERO_LIQUIDATION
        return VaultStatus.ACTIVE_STANDARD

    def add_collateral(self, amount: int) -> None:
        self.collateral_amount += amount

    def remove_collateral(self, amount: int) -> None:
        if self.collateral_amount < amount:
            raise ValueError("Insufficient collateral")
        self.collateral_amount -= amount

    def add_debt(self, amount: int) -> None:
        self.debt_principal += amount

    def remove_debt(self, amount: int) -> None:
        if self.debt_principal < amount:
            raise ValueError("Insufficient debt")
        self.debt_principal -= amount
