from decimal import Decimal
from typing import Tuple

from amm_quotes.utils import BPS_DIVISOR, ceil_div, ceil_int, decimal_sqrt, engine_context, safe_divide, validate_bps
from .reserves import NO, YES, PoolReserves


def fee_multiplier(fee_bps: int) -> int:
    """(1 - fee) scaled by BPS_DIVISOR, e.g. 30 bps -> 9970."""
    validate_bps(fee_bps, 'fee_bps')
    return BPS_DIVISOR - fee_bps


def fee_amount(amount: int, fee_bps: int) -> int:
    """Fee charged on amount, rounded down."""
    validate_bps(fee_bps, 'fee_bps')
    return amount * fee_bps // BPS_DIVISOR


def constant_product_output(input_amount: int, input_reserve: int, output_reserve: int, fee_bps: int) -> int:
    """
    dy = y * dx' / (x + dx') with dx' = dx * (1 - fee).

    Evaluated on integers scaled by BPS_DIVISOR and floored, so the pool never
    pays out more than the invariant allows.
    """
    m = fee_multiplier(fee_bps)
    input_after_fee = input_amount * m
    return output_reserve * input_after_fee // (input_reserve * BPS_DIVISOR + input_after_fee)


def constant_product_input(output_amount: int, input_reserve: int, output_reserve: int, fee_bps: int) -> int:
    """
    Smallest dx with constant_product_output(dx) >= output_amount.

    dx = x * dy / ((y - dy) * (1 - fee)), rounded up.
    """
    if output_amount >= output_reserve:
        raise ValueError(f"Output {output_amount} must be below reserve {output_reserve}")
    m = fee_multiplier(fee_bps)
    return ceil_div(input_reserve * output_amount * BPS_DIVISOR, (output_reserve - output_amount) * m)


def price_impact_pct(input_amount: int, input_reserve: int, fee_bps: int) -> Decimal:
    """
    (1 - execution / spot) * 100 with execution = dy / dx on the unfloored dy.

    With spot = y / x this reduces to 1 - (1 - fee) * x / (x + dx'), which does
    not depend on the output reserve and strictly increases with dx.
    """
    m = fee_multiplier(fee_bps)
    denominator = input_reserve * BPS_DIVISOR + input_amount * m
    numerator = denominator - input_reserve * m
    with engine_context():
        return Decimal(numerator) * 100 / Decimal(denominator)


def within_price_impact(input_amount: int, input_reserve: int, fee_bps: int, max_impact_pct: float) -> bool:
    m = fee_multiplier(fee_bps)
    denominator = input_reserve * BPS_DIVISOR + input_amount * m
    numerator = denominator - input_reserve * m
    with engine_context():
        return Decimal(numerator) * 100 <= Decimal(str(max_impact_pct)) * denominator


def max_input_for_impact(input_reserve: int, max_impact_pct: float, fee_bps: int) -> int:
    """Largest input whose price impact does not exceed max_impact_pct."""
    if not (0 <= max_impact_pct < 100):
        raise ValueError(f"Invalid max_impact_pct: {max_impact_pct}. Must be in [0,100).")
    m = fee_multiplier(fee_bps)
    # D = x*BPS + dx*m <= x*m / (1 - c)
    with engine_context():
        c = Decimal(str(max_impact_pct)) / 100
        estimate = (Decimal(input_reserve * m) / (1 - c) - input_reserve * BPS_DIVISOR) / m
    dx = max(0, int(estimate))
    # settle the boundary exactly on integers
    while within_price_impact(dx + 1, input_reserve, fee_bps, max_impact_pct):
        dx += 1
    while dx > 0 and not within_price_impact(dx, input_reserve, fee_bps, max_impact_pct):
        dx -= 1
    return dx


def calculate_invariant(reserve_x: int, reserve_y: int) -> int:
    return reserve_x * reserve_y


def verify_invariant(old_reserve_x: int, old_reserve_y: int, new_reserve_x: int, new_reserve_y: int) -> bool:
    """k may only grow across a swap; fees stay in the pool."""
    return calculate_invariant(new_reserve_x, new_reserve_y) >= calculate_invariant(old_reserve_x, old_reserve_y)


def input_for_target_price(reserves: PoolReserves, target_yes_price: Decimal, fee_bps: int) -> Tuple[str, int]:
    """
    Side and gross amount to sell so the YES price moves to target_yes_price.

    YES price is y / (y + n). Holding k = y * n, the target reserve is
    y' = sqrt(k * p / (1 - p)); the fee is grossed up on top of the net move.
    Fees that stay in the pool grow k slightly, so the result is an estimate
    that lands marginally past the target.
    """
    y = Decimal(reserves['yes_reserve'])
    n = Decimal(reserves['no_reserve'])
    p = target_yes_price
    if not (Decimal(0) < p < Decimal(1)):
        raise ValueError(f"Invalid target price: {p}. Must be in (0,1).")
    m = fee_multiplier(fee_bps)
    with engine_context():
        k = y * n
        target_yes = decimal_sqrt(safe_divide(k * p, 1 - p))
        if target_yes >= y:
            side, net = YES, target_yes - y
        else:
            side, net = NO, decimal_sqrt(safe_divide(k * (1 - p), p)) - n
        gross = net * BPS_DIVISOR / m
    return side, ceil_int(gross)
