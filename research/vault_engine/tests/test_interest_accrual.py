"""Interest accrual against a float reference computed with numpy"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

import numpy as np
import pytest

from conftest import ADMIN, USER1
from vault_engine.src.constants import (
    MAX_UINT256,
    WAD,
    YEAR_IN_SECONDS,
    RATE_3_PERCENT,
    RATE_3_5_PERCENT,
    RATE_4_PERCENT,
    RATE_4_5_PERCENT,
    RATE_5_PERCENT,
    RATE_6_PERCENT,
    RATE_7_PERCENT,
)
from vault_engine.src.errors import FixedPointError
from vault_engine.src.fixed_point import format_units, parse_units
from vault_engine.src.instructions.accrue_interest import (
    accrue,
    annualized_rate,
    compound_interest,
    pending_debt,
)
from vault_engine.src.state.protocol_config import GlobalState
from vault_engine.src.state.vault import Vault

@dataclass
class AccrualCase:
    """Test case for compounding a per-second rate"""
    description: str
    rate_per_second: int
    time_elapsed: int  # seconds
    expected_growth_range: Tuple[Decimal, Decimal]  # min/max growth factor

def compound_interest_numpy(rate_per_second: int, time_elapsed: int) -> float:
    """Exact (1+r)^t in floating point, r taken from the scaled rate"""
    r = (rate_per_second - WAD) / WAD
    return float(np.exp(time_elapsed * np.log1p(r)))

ACCRUAL_CASES = [
    AccrualCase("Zero elapsed", RATE_5_PERCENT, 0, (Decimal("1"), Decimal("1"))),
    AccrualCase("1 second", RATE_5_PERCENT, 1, (Decimal("1"), Decimal("1.000000002"))),
    AccrualCase("1 hour", RATE_5_PERCENT, 3600, (Decimal("1"), Decimal("1.00001"))),
    AccrualCase("1 day", RATE_5_PERCENT, 86400, (Decimal("1.0001"), Decimal("1.0002"))),
    AccrualCase("1 year at 5%", RATE_5_PERCENT, YEAR_IN_SECONDS, (Decimal("1.0499"), Decimal("1.0501"))),
    AccrualCase("1 year at 7%", RATE_7_PERCENT, YEAR_IN_SECONDS, (Decimal("1.0699"), Decimal("1.0701"))),
    AccrualCase("10 years at 3%", RATE_3_PERCENT, 10 * YEAR_IN_SECONDS, (Decimal("1.3438"), Decimal("1.3440"))),
    AccrualCase("No interest rate", WAD, YEAR_IN_SECONDS, (Decimal("1"), Decimal("1"))),
]

@pytest.mark.parametrize("case", ACCRUAL_CASES, ids=lambda c: c.description)
def test_compound_interest_matches_reference(case):
    growth = compound_interest(case.rate_per_second, case.time_elapsed)
    reference = compound_interest_numpy(case.rate_per_second, case.time_elapsed)

    print(f"{case.description}: fixed point {format_units(growth)}, numpy {reference:.18f}")

    assert case.expected_growth_range[0] <= format_units(growth) <= case.expected_growth_range[1]
    assert growth / WAD == pytest.approx(reference, rel=1e-9)

def test_compound_interest_truncates():
    # floor(r ** t) never exceeds the exact value
    growth = compound_interest(RATE_5_PERCENT, YEAR_IN_SECONDS)
    exact = (Decimal(RATE_5_PERCENT) / WAD) ** YEAR_IN_SECONDS
    assert format_units(growth) <= exact

@pytest.mark.parametrize("rate, annual", [
    (RATE_3_PERCENT, "1.03"),
    (RATE_3_5_PERCENT, "1.035"),
    (RATE_4_PERCENT, "1.04"),
    (RATE_4_5_PERCENT, "1.045"),
    (RATE_5_PERCENT, "1.05"),
    (RATE_6_PERCENT, "1.06"),
    (RATE_7_PERCENT, "1.07"),
])
def test_published_rates_annualize(rate, annual):
    assert abs(format_units(annualized_rate(rate)) - Decimal(annual)) < Decimal("1e-9")

def test_accrue_one_year_at_five_percent():
    state = GlobalState(total_debt=parse_units(1000))
    vault = Vault(owner=USER1, debt_principal=parse_units(1000), last_accrual_time=0)

    interest = accrue(vault, state, YEAR_IN_SECONDS)

    assert abs(format_units(vault.debt_principal) - Decimal(1050)) < Decimal("1e-6")
    assert state.total_debt == vault.debt_principal
    assert interest == vault.debt_principal - parse_units(1000)
    assert vault.last_accrual_time == YEAR_IN_SECONDS

def test_accrue_zero_elapsed_is_unchanged():
    state = GlobalState(total_debt=parse_units(1000))
    vault = Vault(owner=USER1, debt_principal=parse_units(1000), last_accrual_time=500)

    assert accrue(vault, state, 500) == 0
    assert vault.debt_principal == parse_units(1000)
    assert state.total_debt == parse_units(1000)

def test_accrue_is_idempotent_at_same_timestamp():
    state = GlobalState(total_debt=parse_units(1000))
    vault = Vault(owner=USER1, debt_principal=parse_units(1000), last_accrual_time=0)

    accrue(vault, state, 86400)
    debt_after_first = vault.debt_principal
    accrue(vault, state, 86400)

    assert vault.debt_principal == debt_after_first
    assert state.total_debt == debt_after_first

def test_accrue_without_debt_only_moves_timestamp():
    state = GlobalState()
    vault = Vault(owner=USER1, collateral_amount=parse_units(1), last_accrual_time=10)

    assert accrue(vault, state, 1000) == 0
    assert vault.debt_principal == 0
    assert vault.last_accrual_time == 1000

def test_accrue_ignores_earlier_timestamp():
    state = GlobalState(total_debt=parse_units(1000))
    vault = Vault(owner=USER1, debt_principal=parse_units(1000), last_accrual_time=1000)

    accrue(vault, state, 10)
    assert vault.debt_principal == parse_units(1000)
    assert vault.last_accrual_time == 1000

def test_split_accrual_stays_close_to_single_accrual():
    state_a = GlobalState(total_debt=parse_units(1000))
    vault_a = Vault(owner=USER1, debt_principal=parse_units(1000))
    state_b = GlobalState(total_debt=parse_units(1000))
    vault_b = Vault(owner=USER1, debt_principal=parse_units(1000))

    accrue(vault_a, state_a, YEAR_IN_SECONDS)
    for t in range(1, 13):
        accrue(vault_b, state_b, t * YEAR_IN_SECONDS // 12)

    assert abs(vault_a.debt_principal - vault_b.debt_principal) < 10**9

def test_pending_debt_does_not_mutate():
    vault = Vault(owner=USER1, debt_principal=parse_units(1000))
    debt = pending_debt(vault, RATE_5_PERCENT, YEAR_IN_SECONDS)

    assert debt > parse_units(1049)
    assert vault.debt_principal == parse_units(1000)
    assert vault.last_accrual_time == 0

def test_ledger_accrues_before_mutation(ledger, clock):
    ledger.set_rebalancing_enabled(ADMIN, False)
    ledger.deposit_collateral(USER1, parse_units(10))
    ledger.mint(USER1, parse_units(1000))

    clock.advance(YEAR_IN_SECONDS)
    accrued = ledger.get_accrued_debt(USER1)
    assert abs(format_units(accrued) - Decimal(1050)) < Decimal("1e-6")
    # reads leave the stored principal alone
    assert ledger.get_vault(USER1).debt_principal == parse_units(1000)

    ledger.deposit_collateral(USER1, parse_units(1))
    assert ledger.get_vault(USER1).debt_principal == accrued
    assert ledger.state.total_debt == accrued
    assert ledger.get_vault(USER1).last_accrual_time == clock.now

def test_ratio_reads_use_accrued_debt(ledger, clock):
    ledger.set_rebalancing_enabled(ADMIN, False)
    ledger.deposit_collateral(USER1, parse_units(3))
    ledger.mint(USER1, parse_units(4000))
    assert ledger.get_collateral_ratio(USER1) == 15 * WAD // 10

    clock.advance(YEAR_IN_SECONDS)
    accrued = ledger.get_accrued_debt(USER1)
    assert ledger.get_collateral_ratio(USER1) == parse_units(6000) * WAD // accrued
    assert ledger.get_collateral_ratio(USER1) < 15 * WAD // 10

@pytest.mark.parametrize("rate", [11 * WAD // 10, 2 * WAD])
def test_annualized_rate_saturates_for_steep_rates(ledger, rate):
    assert annualized_rate(rate) == MAX_UINT256

    ledger.set_rate_per_second(ADMIN, rate)
    assert ledger.get_annualized_rate() == MAX_UINT256

def test_accrual_overflow_rolls_back_until_rate_is_lowered(ledger, clock, token):
    ledger.set_rebalancing_enabled(ADMIN, False)
    ledger.deposit_collateral(USER1, parse_units(3))
    ledger.mint(USER1, parse_units(100))
    ledger.set_rate_per_second(ADMIN, 2 * WAD)
    vault_before = ledger.get_vault(USER1)

    clock.advance(300)
    # 2 ** 300 growth leaves the uint256 range before any check runs
    with pytest.raises(FixedPointError):
        ledger.burn(USER1, parse_units(50))
    assert ledger.get_vault(USER1) == vault_before

    ledger.set_rate_per_second(ADMIN, RATE_5_PERCENT)
    ledger.burn(USER1, parse_units(50))
    assert ledger.get_vault(USER1).debt_principal > parse_units(50)
    assert token.balance_of(USER1) == parse_units(50)
