"""Protocol configuration and global state management"""
from dataclasses import dataclass
from enum import Enum

from ..constants import (
    WAD,
    MIN_RATE_PER_SECOND,
    MAX_RATE_PER_SECOND,
    DEFAULT_COLLATERAL_FLOOR,
    DEFAULT_STANDARD_RATIO,
    DEFAULT_ZERO_LIQUIDATION_RATIO,
    DEFAULT_BONUS_PERCENT,
    DEFAULT_REBALANCE_INTERVAL,
    DEFAULT_RATE_PER_SECOND,
    DEFAULT_REBALANCING_ENABLED,
)
from ..errors import ConfigurationError


def validate_collateral_floor(floor: int) -> None:
    if floor < 0:
        raise ConfigurationError("Collateral floor must be >= 0")

def validate_ratios(standard_ratio: int, zero_liquidation_ratio: int) -> None:
    if standard_ratio < WAD:
        raise ConfigurationError("Standard ratio must be >= 100%")
    if zero_liquidation_ratio <= standard_ratio:
        raise ConfigurationError("Zero liquidation ratio must exceed standard ratio")

def validate_bonus_percent(bonus_percent: int) -> None:
    if bonus_percent < WAD:
        raise ConfigurationError("Bonus percent must be >= 100%")

def validate_rebalance_interval(interval: int) -> None:
    if interval <= 0:
        raise ConfigurationError("Rebalance interval must be > 0")

def validate_rate_per_second(rate: int) -> None:
    if not MIN_RATE_PER_SECOND <= rate <= MAX_RATE_PER_SECOND:
        raise ConfigurationError("Rate per second must be between 1.0 and 2.0")


@dataclass
class ProtocolParameters:
    """Owner-settable parameters, all WAD scaled except the interval"""
    collateral_floor: int = DEFAULT_COLLATERAL_FLOOR
    standard_ratio: int = DEFAULT_STANDARD_RATIO
    zero_liquidation_ratio: int = DEFAULT_ZERO_LIQUIDATION_RATIO
    bonus_percent: int = DEFAULT_BONUS_PERCENT
    rebalance_interval: int = DEFAULT_REBALANCE_INTERVAL

    def __post_init__(self):
        validate_collateral_floor(self.collateral_floor)
        validate_ratios(self.standard_ratio, self.zero_liquidation_ratio)
        validate_bonus_percent(self.bonus_percent)
        validate_rebalance_interval(self.rebalance_interval)

    def threshold_for(self, zero_liquidation: bool) -> int:
        """Minimum ratio a vault must keep after a mutation"""
        return self.zero_liquidation_ratio if zero_liquidation else self.standard_ratio


class SystemStatus(Enum):
    RUNNING = "running"
    PAUSED = "paused"


@dataclass
class GlobalState:
    """Aggregate totals and the system-wide rate"""
    total_collateral: int = 0
    total_debt: int = 0
    current_rate_per_second: int = DEFAULT_RATE_PER_SECOND
    last_rebalance_time: int = 0
    rebalancing_enabled: bool = DEFAULT_REBALANCING_ENABLED
    status: SystemStatus = SystemStatus.RUNNING

    def update_totals(self, collateral_change: int = 0, debt_change: int = 0) -> None:
        """Update totals when a vault changes"""
        self.total_collateral += collateral_change
        self.total_debt += debt_change
