"""Role gating of the debt token"""
import pytest

from vault_engine.src.access import PermissionSet, Role
from vault_engine.src.debt_token import DebtToken
from vault_engine.src.errors import (
    AccessControlError,
    InputValidationError,
    InsufficientBalanceError,
)
from vault_engine.src.fixed_point import parse_units

MINTER = "minter"
BURNER = "burner"
RANDOM = "random"


@pytest.fixture
def debt_token():
    return DebtToken(PermissionSet({MINTER: {Role.MINTER}, BURNER: {Role.BURNER}}))

def test_minter_can_mint(debt_token):
    debt_token.mint(MINTER, RANDOM, parse_units(1))
    assert debt_token.balance_of(RANDOM) == parse_units(1)
    assert debt_token.total_supply == parse_units(1)

def test_burner_cannot_mint(debt_token):
    with pytest.raises(AccessControlError):
        debt_token.mint(BURNER, RANDOM, 1)

def test_burner_can_burn(debt_token):
    debt_token.mint(MINTER, RANDOM, parse_units(1))
    debt_token.burn(BURNER, RANDOM, parse_units(1))
    assert debt_token.balance_of(RANDOM) == 0
    assert debt_token.total_supply == 0

def test_minter_cannot_burn(debt_token):
    with pytest.raises(AccessControlError):
        debt_token.burn(MINTER, RANDOM, 1)

def test_random_account_cannot_mint_or_burn(debt_token):
    with pytest.raises(AccessControlError):
        debt_token.mint(RANDOM, RANDOM, 1)
    with pytest.raises(AccessControlError):
        debt_token.burn(RANDOM, RANDOM, 1)

def test_burn_more_than_balance_reverts(debt_token):
    debt_token.mint(MINTER, RANDOM, 5)
    with pytest.raises(InsufficientBalanceError):
        debt_token.burn(BURNER, RANDOM, 6)

def test_zero_amounts_revert(debt_token):
    with pytest.raises(InputValidationError):
        debt_token.mint(MINTER, RANDOM, 0)
    with pytest.raises(InputValidationError):
        debt_token.transfer(RANDOM, MINTER, 0)

def test_transfer(debt_token):
    debt_token.mint(MINTER, RANDOM, parse_units(10))
    debt_token.transfer(RANDOM, MINTER, parse_units(4))

    assert debt_token.balance_of(RANDOM) == parse_units(6)
    assert debt_token.balance_of(MINTER) == parse_units(4)
    assert debt_token.total_supply == parse_units(10)

    with pytest.raises(InsufficientBalanceError):
        debt_token.transfer(MINTER, RANDOM, parse_units(5))

def test_revoked_role_is_rejected(debt_token):
    debt_token.permissions.revoke(Role.MINTER, MINTER)
    with pytest.raises(AccessControlError):
        debt_token.mint(MINTER, RANDOM, 1)
