"""Interest rate rebalancing driven by system-wide collateralization"""
import logging
from typing import Optional

from ..constants import RATE_TIERS
from ..events import InterestRateChanged
from ..oracle import PriceOracle, normalized_price
from ..state.protocol_config import GlobalState, ProtocolParameters
from .collateral_ratio import ratio_of

logger = logging.getLogger(__name__)

def global_collateral_ratio(state: GlobalState, price: int) -> int:
    """Aggregate collateral value over aggregate debt, WAD scaled"""
    return ratio_of(state.total_collateral, state.total_debt, price)

def select_rate(global_ratio: int) -> int:
    """Per-second rate of the first tier whose floor the ratio reaches"""
    for min_ratio, rate in RATE_TIERS:
        if global_ratio >= min_ratio:
            return rate
    # RATE_TIERS ends with a zero floor
    return RATE_TIERS[-1][1]

def rebalance_due(state: GlobalState, params: ProtocolParameters, now: int) -> bool:
    return (
        state.rebalancing_enabled
        and now - state.last_rebalance_time >= params.rebalance_interval
    )

def maybe_rebalance(
    state: GlobalState,
    params: ProtocolParameters,
    oracle: PriceOracle,
    now: int,
) -> Optional[InterestRateChanged]:
    """Recompute the system rate if rebalancing is enabled and due.

    Returns the rate change notification, or None when nothing changed.
    With no outstanding debt the ratio is unbounded and the call is skipped
    without consuming the interval.
    """
    if not rebalance_due(state, params, now):
        return None
    if state.total_debt == 0:
        logger.debug("Skipping rebalance, no outstanding debt")
        return None

    global_ratio = global_collateral_ratio(state, normalized_price(oracle))
    new_rate = select_rate(global_ratio)
    old_rate = state.current_rate_per_second

    state.current_rate_per_second = new_rate
    state.last_rebalance_time = now

    if new_rate == old_rate:
        return None

    logger.info(
        "Rebalanced rate per second %s -> %s at global ratio %s",
        old_rate, new_rate, global_ratio,
    )
    return InterestRateChanged(old_rate=old_rate, new_rate=new_rate)
