import math
from decimal import Decimal
from numbers import Integral
from typing import Any, Optional

from .params import MAX_SLIPPAGE_BPS, PRICE_SUM_TOLERANCE
from .reserves import PoolReserves
from .result import (
    CalculationError,
    INVALID_AMOUNT,
    INVALID_NO_RESERVE,
    INVALID_RESERVE,
    INVALID_SLIPPAGE,
    INVALID_YES_RESERVE,
    calc_error,
)


def as_raw(value: Any) -> Optional[int]:
    """
    Coerce a raw fixed-point amount to int.

    Integral floats and Decimals are accepted; anything fractional, non-finite
    or non-numeric (bool included) returns None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return None
    return None


def validate_reserves(reserves: PoolReserves) -> Optional[CalculationError]:
    """First violation only, YES side checked before NO."""
    yes = as_raw(reserves.get('yes_reserve'))
    if yes is None or yes < 0:
        return calc_error(INVALID_YES_RESERVE, "YES reserve must be a non-negative integer", 'yes_reserve')
    no = as_raw(reserves.get('no_reserve'))
    if no is None or no < 0:
        return calc_error(INVALID_NO_RESERVE, "NO reserve must be a non-negative integer", 'no_reserve')
    return None


def validate_amount(amount: Any, field: str, allow_zero: bool = False) -> Optional[CalculationError]:
    value = as_raw(amount)
    if value is None or value < 0 or (value == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        return calc_error(INVALID_AMOUNT, f"{field} must be a {qualifier} integer", field)
    return None


def validate_reserve(reserve: Any, field: str) -> Optional[CalculationError]:
    value = as_raw(reserve)
    if value is None or value <= 0:
        return calc_error(INVALID_RESERVE, f"{field} must be a positive integer", field)
    return None


def validate_slippage_bps(slippage_bps: Any, max_slippage_bps: int = MAX_SLIPPAGE_BPS) -> Optional[CalculationError]:
    value = as_raw(slippage_bps)
    if value is None or not (0 <= value <= max_slippage_bps):
        return calc_error(
            INVALID_SLIPPAGE,
            f"Slippage tolerance must be between 0 and {max_slippage_bps} bps",
            'slippage_bps',
        )
    return None


def validate_complementary_prices(yes: float, no: float, tolerance: float = PRICE_SUM_TOLERANCE) -> bool:
    return abs(yes + no - 1.0) < tolerance
