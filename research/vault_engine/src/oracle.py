"""Price feed collaborators"""
from typing import Protocol, Tuple

from .constants import DEFAULT_FEED_DECIMALS
from .errors import InvalidPriceError
from .fixed_point import to_wad


class PriceOracle(Protocol):
    def latest_price(self) -> Tuple[int, int]:
        """Return (price, decimals) of one collateral unit in debt units"""
        ...


class MockPriceFeed:
    """Fixed answer feed, 8 decimals unless told otherwise"""

    def __init__(self, answer: int, decimals: int = DEFAULT_FEED_DECIMALS):
        self.answer = answer
        self.decimals = decimals

    def latest_price(self) -> Tuple[int, int]:
        return self.answer, self.decimals

    def update_answer(self, answer: int) -> None:
        self.answer = answer


def normalized_price(oracle: PriceOracle) -> int:
    """Oracle price rescaled to 18 decimals"""
    price, decimals = oracle.latest_price()
    if price <= 0:
        raise InvalidPriceError(f"Invalid oracle price: {price}")
    return to_wad(price, decimals)
