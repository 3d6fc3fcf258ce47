"""Liquidation of undercollateralised standard vaults"""
from ..errors import (
    InputValidationError,
    InsufficientBalanceError,
    InsufficientCollateralError,
    VaultNotUndercollateralisedError,
    ZeroLiquidationVaultError,
)
from ..fixed_point import wmul
from ..state.protocol_config import GlobalState, ProtocolParameters
from ..state.vault import Vault
from .collateral_ratio import collateral_for_debt, ratio_of

def liquidation_reward(repay_amount: int, price: int, bonus_percent: int) -> int:
    """
    Collateral paid to the liquidator for repaying `repay_amount`.

    (repay / price) * bonus, truncating at each step. At price 2000 and a
    105% bonus, repaying 1500 pays 0.7875 collateral units.
    """
    return wmul(collateral_for_debt(repay_amount, price), bonus_percent)

def is_liquidatable(vault: Vault, debt: int, price: int, params: ProtocolParameters) -> bool:
    if vault.zero_liquidation or debt == 0:
        return False
    return ratio_of(vault.collateral_amount, debt, price) < params.standard_ratio

def check_liquidation(
    vault: Vault,
    repay_amount: int,
    price: int,
    params: ProtocolParameters,
) -> int:
    """Validate a liquidation against an accrued vault and return the reward.

    Raises in this order: zero repayment, protected vault, healthy vault,
    repayment above debt, reward above vault collateral.
    """
    if repay_amount == 0:
        raise InputValidationError("Amount must be > 0")
    if vault.zero_liquidation:
        raise ZeroLiquidationVaultError("Zero Liquidation vault cannot be liquidated")

    ratio = ratio_of(vault.collateral_amount, vault.debt_principal, price)
    if ratio >= params.standard_ratio:
        raise VaultNotUndercollateralisedError("Vault not undercollateralised")
    if repay_amount > vault.debt_principal:
        raise InsufficientBalanceError("Cannot repay more than debt")

    reward = liquidation_reward(repay_amount, price, params.bonus_percent)
    if reward > vault.collateral_amount:
        raise InsufficientCollateralError("Not enough ETH in vault")
    return reward

def apply_liquidation(vault: Vault, state: GlobalState, repay_amount: int, reward: int) -> None:
    """Book the repayment and the seized collateral against vault and totals"""
    vault.remove_debt(repay_amount)
    vault.remove_collateral(reward)
    state.update_totals(collateral_change=-reward, debt_change=-repay_amount)
