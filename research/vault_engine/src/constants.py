# Fixed point scale factors
WAD = 1_000_000_000_000_000_000  # 1e18 for amounts, ratios, rates and prices
ENGINE_DECIMALS = 18
MAX_UINT256 = 2**256 - 1  # Sentinel ratio for vaults without debt

# Time constants
YEAR_IN_SECONDS = 365 * 24 * 60 * 60  # 365 days * 24 hours * 60 minutes * 60 seconds
HOUR_IN_SECONDS = 60 * 60

# Per-second rate bounds
MIN_RATE_PER_SECOND = WAD  # 1.0, no interest
MAX_RATE_PER_SECOND = 2 * WAD  # 2.0

# Per-second rates, floor(annual ** (1 / YEAR_IN_SECONDS) * 1e18)
RATE_3_PERCENT = 1_000_000_000_937_303_470
RATE_3_5_PERCENT = 1_000_000_001_090_862_085
RATE_4_PERCENT = 1_000_000_001_243_680_656
RATE_4_5_PERCENT = 1_000_000_001_395_766_281
RATE_5_PERCENT = 1_000_000_001_547_125_957
RATE_6_PERCENT = 1_000_000_001_847_694_957
RATE_7_PERCENT = 1_000_000_002_145_441_671

# Rebalancing tiers: (minimum global ratio, per-second rate), highest ratio first
RATE_TIERS = (
    (2 * WAD, RATE_3_PERCENT),           # >= 200%
    (18 * WAD // 10, RATE_3_5_PERCENT),  # [180%, 200%)
    (16 * WAD // 10, RATE_4_PERCENT),    # [160%, 180%)
    (14 * WAD // 10, RATE_4_5_PERCENT),  # [140%, 160%)
    (12 * WAD // 10, RATE_5_PERCENT),    # [120%, 140%)
    (WAD, RATE_6_PERCENT),               # [100%, 120%)
    (0, RATE_7_PERCENT),                 # < 100%
)

# Default parameters
DEFAULT_COLLATERAL_FLOOR = WAD // 10               # 0.1 collateral units
DEFAULT_STANDARD_RATIO = 15 * WAD // 10            # 150%
DEFAULT_ZERO_LIQUIDATION_RATIO = 25 * WAD // 10    # 250%
DEFAULT_BONUS_PERCENT = 105 * WAD // 100           # 105%
DEFAULT_REBALANCE_INTERVAL = 12 * HOUR_IN_SECONDS  # 12h
DEFAULT_RATE_PER_SECOND = RATE_5_PERCENT
DEFAULT_REBALANCING_ENABLED = True

# Oracle constants
DEFAULT_FEED_DECIMALS = 8
