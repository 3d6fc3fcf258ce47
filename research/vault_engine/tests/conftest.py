"""Shared fixtures: a ledger priced at $2000 with 8 decimal feed, on a manual clock"""
import pytest

from vault_engine.src.access import PermissionSet, Role
from vault_engine.src.clock import ManualClock
from vault_engine.src.debt_token import DebtToken
from vault_engine.src.native_asset import NativeAsset
from vault_engine.src.oracle import MockPriceFeed
from vault_engine.src.vault_ledger import VaultLedger

ADMIN = "admin"
USER1 = "user1"
USER2 = "user2"
USER3 = "user3"


def feed_price(dollars) -> int:
    """Price in the feed's 8 decimals"""
    return int(dollars * 10**8)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def price_feed():
    return MockPriceFeed(feed_price(2000))


@pytest.fixture
def token():
    # Deployer holds both capabilities
    return DebtToken(PermissionSet({ADMIN: {Role.MINTER, Role.BURNER}}))


@pytest.fixture
def native():
    return NativeAsset()


@pytest.fixture
def ledger(token, price_feed, native, clock):
    ledger = VaultLedger(token, price_feed, ADMIN, native=native, clock=clock)
    token.permissions.grant(Role.MINTER, ledger.address)
    token.permissions.grant(Role.BURNER, ledger.address)
    return ledger
