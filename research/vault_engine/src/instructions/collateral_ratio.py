"""Collateral ratio computation against the oracle price"""
from ..constants import MAX_UINT256
from ..fixed_point import checked_div, checked_mul, wdiv

def collateral_for_debt(debt_amount: int, price: int) -> int:
    """Collateral units worth `debt_amount` at `price`"""
    return wdiv(debt_amount, price)

def ratio_of(collateral_amount: int, debt: int, price: int) -> int:
    """
    collateral * price / debt, WAD scaled (2e18 is 200%).

    Returns MAX_UINT256 for a vault without debt. `debt` must already
    include accrued interest.
    """
    if debt == 0:
        return MAX_UINT256
    # collateral (1e18) * price (1e18) / debt (1e18) keeps one WAD factor
    return checked_div(checked_mul(collateral_amount, price), debt)
