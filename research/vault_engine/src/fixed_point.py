"""Integer fixed point helpers.

All values are scaled by WAD (1e18). Every product is checked against the
uint256 bound and every division truncates toward zero.
"""
from decimal import Decimal

from .constants import WAD, MAX_UINT256
from .errors import FixedPointError

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    result = a * b
    if result > MAX_UINT256:
        raise FixedPointError("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Divide with truncation"""
    if b == 0:
        raise FixedPointError("Division by zero")
    return a // b

def wmul(a: int, b: int) -> int:
    """a * b / WAD, truncated"""
    return checked_mul(a, b) // WAD

def wdiv(a: int, b: int) -> int:
    """a * WAD / b, truncated"""
    return checked_div(checked_mul(a, WAD), b)

def rpow(base: int, exponent: int) -> int:
    """Raise a WAD-scaled base to an integer power by repeated squaring.

    Each intermediate multiplication truncates, so the result is never
    above the exact value. rpow(x, 0) is WAD for any x, including zero.
    """
    if exponent < 0:
        raise FixedPointError("Negative exponent")

    result = WAD
    while exponent > 0:
        if exponent & 1:
            result = wmul(result, base)
        exponent >>= 1
        if exponent:
            base = wmul(base, base)
    return result

def to_wad(amount, decimals: int) -> int:
    """Rescale an integer with `decimals` places to 18 decimals"""
    if decimals <= 18:
        return checked_mul(amount, 10 ** (18 - decimals))
    return amount // 10 ** (decimals - 18)

def parse_units(value, decimals: int = 18) -> int:
    """Human readable amount ("0.7875", 3, Decimal) to a scaled integer"""
    scaled = Decimal(str(value)).scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise FixedPointError(f"{value} has more than {decimals} decimals")
    return int(scaled)

def format_units(amount: int, decimals: int = 18) -> Decimal:
    """Scaled integer back to an exact Decimal"""
    return Decimal(amount).scaleb(-decimals)
