import logging
from decimal import Decimal
from typing import Sequence

import numpy as np
from typing_extensions import TypedDict

from amm_quotes.utils import BPS_DIVISOR, engine_context, to_decimal
from .amm_math import (
    constant_product_input,
    constant_product_output,
    fee_amount,
    fee_multiplier,
    input_for_target_price,
    max_input_for_impact,
    price_impact_pct,
)
from .params import DEFAULT_SLIPPAGE_BPS, FEE_BPS, MAX_PRICE_IMPACT_PCT, MAX_SLIPPAGE_BPS
from .reserves import NO, YES, PoolReserves, get_swap_reserves
from .result import (
    AMOUNT_TOO_SMALL,
    EXCESSIVE_PRICE_IMPACT,
    INSUFFICIENT_RESERVE,
    INVALID_PRICE,
    INVALID_SIDE,
    Result,
    calc_error,
    fail,
    ok,
)
from .validation import as_raw, validate_amount, validate_reserve, validate_reserves, validate_slippage_bps

logger = logging.getLogger(__name__)


class SwapQuote(TypedDict):
    input_amount: int
    output_amount: int
    fee: int
    price_impact: float  # percent
    effective_price: float
    minimum_output: int


class PriceTargetTrade(TypedDict):
    input_side: str
    input_amount: int


def _validate_swap_inputs(amount, amount_field: str, input_reserve, output_reserve):
    return (
        validate_amount(amount, amount_field)
        or validate_reserve(input_reserve, 'input_reserve')
        or validate_reserve(output_reserve, 'output_reserve')
    )


def _impact_ceiling(max_price_impact: float) -> Decimal:
    ceiling = to_decimal(max_price_impact)
    if not ceiling.is_finite() or ceiling < 0:
        raise ValueError(f"Invalid max_price_impact: {max_price_impact}. Must be a finite percentage.")
    return ceiling


def min_output(expected_output: int, slippage_bps: int) -> int:
    return expected_output * (BPS_DIVISOR - slippage_bps) // BPS_DIVISOR


def calculate_swap_output(
    input_amount: int,
    input_reserve: int,
    output_reserve: int,
    fee_bps: int = FEE_BPS,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    max_price_impact: float = MAX_PRICE_IMPACT_PCT,
) -> Result:
    """
    Quote selling input_amount into a constant-product pool.

    Every integer field is rounded down: output_amount and minimum_output are
    what the chain will at least pay, fee is fee_bps of the input. The fee
    itself is taken inside the exchange formula, not subtracted again.
    """
    ceiling = _impact_ceiling(max_price_impact)
    err = _validate_swap_inputs(input_amount, 'input_amount', input_reserve, output_reserve) \
        or validate_slippage_bps(slippage_bps)
    if err is not None:
        logger.debug(f"Swap quote rejected: {err['code']} ({err['field']})")
        return fail(err)

    dx = as_raw(input_amount)
    x = as_raw(input_reserve)
    y = as_raw(output_reserve)
    slippage = as_raw(slippage_bps)

    impact = price_impact_pct(dx, x, fee_bps)
    if impact > ceiling:
        logger.debug(f"Swap quote rejected: impact {impact:.2f}% above {max_price_impact}%")
        return fail(calc_error(
            EXCESSIVE_PRICE_IMPACT,
            f"Price impact too high: {impact:.2f}% (max: {max_price_impact}%)",
            'input_amount',
        ))

    output_amount = constant_product_output(dx, x, y, fee_bps)
    if output_amount == 0:
        return fail(calc_error(AMOUNT_TOO_SMALL, "Trade is too small to produce any output", 'input_amount'))

    with engine_context():
        effective_price = Decimal(output_amount) / Decimal(dx)

    return ok(SwapQuote(
        input_amount=dx,
        output_amount=output_amount,
        fee=fee_amount(dx, fee_bps),
        price_impact=float(impact),
        effective_price=float(effective_price),
        minimum_output=min_output(output_amount, slippage),
    ))


def calculate_trade_quote(
    reserves: PoolReserves,
    input_side: str,
    input_amount: int,
    fee_bps: int = FEE_BPS,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    max_price_impact: float = MAX_PRICE_IMPACT_PCT,
) -> Result:
    """Swap quote for selling input_side ('YES' or 'NO') into a pool snapshot."""
    err = validate_reserves(reserves)
    if err is not None:
        return fail(err)
    if input_side not in (YES, NO):
        return fail(calc_error(INVALID_SIDE, "Side must be 'YES' or 'NO'", 'input_side'))
    input_reserve, output_reserve = get_swap_reserves(reserves, input_side)
    return calculate_swap_output(input_amount, input_reserve, output_reserve, fee_bps, slippage_bps, max_price_impact)


def calculate_swap_input(output_amount: int, input_reserve: int, output_reserve: int, fee_bps: int = FEE_BPS) -> Result:
    """Input needed to receive at least output_amount, rounded up."""
    err = _validate_swap_inputs(output_amount, 'output_amount', input_reserve, output_reserve)
    if err is not None:
        return fail(err)
    dy = as_raw(output_amount)
    y = as_raw(output_reserve)
    if dy >= y:
        return fail(calc_error(INSUFFICIENT_RESERVE, f"Output amount must be below the reserve of {y}", 'output_amount'))
    return ok(constant_product_input(dy, as_raw(input_reserve), y, fee_bps))


def calculate_price_impact(input_amount: int, input_reserve: int, output_reserve: int, fee_bps: int = FEE_BPS) -> Result:
    """Price impact in percent, without applying the impact ceiling."""
    err = _validate_swap_inputs(input_amount, 'input_amount', input_reserve, output_reserve)
    if err is not None:
        return fail(err)
    return ok(float(price_impact_pct(as_raw(input_amount), as_raw(input_reserve), fee_bps)))


def calculate_min_output(expected_output: int, slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> Result:
    err = validate_amount(expected_output, 'expected_output', allow_zero=True) or validate_slippage_bps(slippage_bps)
    if err is not None:
        return fail(err)
    return ok(min_output(as_raw(expected_output), as_raw(slippage_bps)))


def validate_slippage(expected_output: int, minimum_output: int, slippage_bps: int) -> bool:
    """True when minimum_output honours slippage_bps; tolerances above the cap never do."""
    if not (0 <= slippage_bps <= MAX_SLIPPAGE_BPS):
        return False
    return minimum_output >= min_output(expected_output, slippage_bps)


def max_swap_input(input_reserve: int, fee_bps: int = FEE_BPS, max_price_impact: float = MAX_PRICE_IMPACT_PCT) -> Result:
    """Largest input calculate_swap_output accepts for this reserve."""
    err = validate_reserve(input_reserve, 'input_reserve')
    if err is not None:
        return fail(err)
    return ok(max_input_for_impact(as_raw(input_reserve), max_price_impact, fee_bps))


def calculate_trade_to_price(reserves: PoolReserves, target_yes_price: float, fee_bps: int = FEE_BPS) -> Result:
    """Estimate the trade that moves the YES price to target_yes_price."""
    err = validate_reserves(reserves)
    if err is not None:
        return fail(err)
    if as_raw(reserves['yes_reserve']) == 0 or as_raw(reserves['no_reserve']) == 0:
        return fail(calc_error(INSUFFICIENT_RESERVE, "Both reserves must be funded to move the price", 'reserves'))
    target = to_decimal(target_yes_price)
    if not target.is_finite() or not (Decimal(0) < target < Decimal(1)):
        return fail(calc_error(INVALID_PRICE, "Target price must be strictly between 0 and 1", 'target_yes_price'))

    snapshot = {'yes_reserve': as_raw(reserves['yes_reserve']), 'no_reserve': as_raw(reserves['no_reserve'])}
    side, amount = input_for_target_price(snapshot, target, fee_bps)
    return ok(PriceTargetTrade(input_side=side, input_amount=amount))


def price_impact_curve(input_amounts: Sequence[int], input_reserve: int, fee_bps: int = FEE_BPS) -> np.ndarray:
    """
    Price impact in percent for each input size, for charting only.

    Float arithmetic; quotes that will be submitted must come from
    calculate_swap_output.
    """
    if input_reserve <= 0:
        raise ValueError(f"Invalid input_reserve: {input_reserve}. Must be positive.")
    m = fee_multiplier(fee_bps) / BPS_DIVISOR
    dx = np.asarray(input_amounts, dtype=np.float64)
    if np.any(dx < 0):
        raise ValueError("Input amounts must be non-negative.")
    return (1.0 - m * input_reserve / (input_reserve + m * dx)) * 100.0
