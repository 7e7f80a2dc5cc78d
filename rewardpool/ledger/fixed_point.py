"""
Fixed-point helpers and the accrual time window.

All amounts are Python integers. Rates and the per-weight accumulator are
scaled by ``precision`` (10**18 by default) so that small emission rates do
not truncate to zero. Every division rounds down, which keeps dust in the pool.
"""

from __future__ import annotations

from ..errors import PreconditionViolation

DEFAULT_PRECISION_DECIMALS = 18
PRECISION = 10 ** DEFAULT_PRECISION_DECIMALS

SECONDS_PER_DAY = 24 * 60 * 60


def effective_time(now: int, round_end: int) -> int:
    """Latest instant at which the current reward rate still applies."""
    return min(now, round_end)


def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute ``a * b // denominator`` rounding toward zero."""
    if denominator <= 0:
        raise PreconditionViolation(f"denominator must be positive, got {denominator}")
    return (a * b) // denominator


def to_units(amount: int, decimals: int = DEFAULT_PRECISION_DECIMALS) -> int:
    """Scale a whole-token amount to base units (``5 -> 5 * 10**18``)."""
    return amount * 10 ** decimals


def from_units(amount: int, decimals: int = DEFAULT_PRECISION_DECIMALS) -> float:
    """Convert base units to a float token amount for display."""
    return amount / 10 ** decimals


def format_amount(amount: int, symbol: str = "", decimals: int = DEFAULT_PRECISION_DECIMALS, places: int = 4) -> str:
    """Format base units as a human readable token string."""
    text = f"{from_units(amount, decimals):,.{places}f}"
    return f"{text} {symbol}" if symbol else text


__all__ = [
    "DEFAULT_PRECISION_DECIMALS",
    "PRECISION",
    "SECONDS_PER_DAY",
    "effective_time",
    "mul_div",
    "to_units",
    "from_units",
    "format_amount",
]
