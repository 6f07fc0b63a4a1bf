import logging
import math
from decimal import Decimal

from typing_extensions import TypedDict

from amm_quotes.utils import BPS_DIVISOR, ceil_div, engine_context
from .params import MIN_LIQUIDITY, RATIO_TOLERANCE_BPS
from .reserves import PoolReserves
from .result import (
    AMOUNT_TOO_SMALL,
    INSUFFICIENT_LP_SUPPLY,
    INSUFFICIENT_RESERVE,
    INVALID_RATIO,
    Result,
    calc_error,
    fail,
    ok,
)
from .validation import as_raw, validate_amount, validate_reserves

logger = logging.getLogger(__name__)


class LiquidityQuote(TypedDict):
    yes_amount: int
    no_amount: int
    lp_tokens: int
    share_of_pool: float  # percent, (0, 100]


class RemoveLiquidityQuote(TypedDict):
    lp_tokens: int
    yes_amount: int
    no_amount: int
    share_of_pool: float  # percent of the pool withdrawn


def _share_pct(lp_tokens: int, total_after: int) -> float:
    with engine_context():
        return float(Decimal(lp_tokens) * 100 / Decimal(total_after))


def _too_small(field: str, min_liquidity: int):
    return calc_error(
        AMOUNT_TOO_SMALL,
        f"Amount too small. Minimum: {min_liquidity} raw units",
        field,
    )


def _one_sided_pool():
    return calc_error(INVALID_RATIO, "Pool holds only one side; its ratio is undefined", 'reserves')


def calculate_liquidity_quote(
    yes_amount: int,
    reserves: PoolReserves,
    total_lp_supply: int = 0,
    min_liquidity: int = MIN_LIQUIDITY,
) -> Result:
    """
    Quote a deposit of yes_amount YES tokens plus the NO tokens the pool
    requires alongside it.

    An empty pool takes a 1:1 bootstrap deposit and hands the depositor the
    whole pool. Otherwise the NO amount follows the pool ratio and the LP
    amount is the smaller of the two ratio-implied mints, so a deposit is never
    credited for more than it brings.
    """
    err = validate_amount(yes_amount, 'yes_amount', allow_zero=True) or validate_reserves(reserves) \
        or validate_amount(total_lp_supply, 'total_lp_supply', allow_zero=True)
    if err is None and as_raw(yes_amount) < min_liquidity:
        err = _too_small('yes_amount', min_liquidity)
    if err is not None:
        logger.debug(f"Liquidity quote rejected: {err['code']} ({err['field']})")
        return fail(err)

    yes = as_raw(yes_amount)
    yes_reserve = as_raw(reserves['yes_reserve'])
    no_reserve = as_raw(reserves['no_reserve'])
    supply = as_raw(total_lp_supply)

    if yes_reserve == 0 and no_reserve == 0:
        return ok(LiquidityQuote(yes_amount=yes, no_amount=yes, lp_tokens=yes, share_of_pool=100.0))
    if yes_reserve == 0 or no_reserve == 0:
        return fail(_one_sided_pool())

    no = yes * no_reserve // yes_reserve
    if no == 0:
        return fail(_too_small('yes_amount', min_liquidity))

    if supply == 0:
        # funded pool with no outstanding LP: the depositor is the only holder
        return ok(LiquidityQuote(yes_amount=yes, no_amount=no, lp_tokens=math.isqrt(yes * no), share_of_pool=100.0))

    lp_tokens = min(yes * supply // yes_reserve, no * supply // no_reserve)
    if lp_tokens == 0:
        return fail(_too_small('yes_amount', min_liquidity))

    return ok(LiquidityQuote(
        yes_amount=yes,
        no_amount=no,
        lp_tokens=lp_tokens,
        share_of_pool=_share_pct(lp_tokens, supply + lp_tokens),
    ))


def ratio_deviation_bps(yes_amount: int, no_amount: int, yes_reserve: int, no_reserve: int) -> int:
    """How far yes/no strays from the pool ratio, in bps of the pool ratio, rounded up."""
    return ceil_div(abs(yes_amount * no_reserve - no_amount * yes_reserve) * BPS_DIVISOR, no_amount * yes_reserve)


def calculate_add_liquidity(
    yes_amount: int,
    no_amount: int,
    reserves: PoolReserves,
    total_lp_supply: int = 0,
    strict: bool = False,
    ratio_tolerance_bps: int = RATIO_TOLERANCE_BPS,
    min_liquidity: int = MIN_LIQUIDITY,
) -> Result:
    """
    Quote a two-sided deposit.

    The first deposit (no reserves or no LP supply) sets the ratio and mints
    isqrt(yes * no). Later deposits mint the smaller ratio-implied amount and
    only take the tokens that amount covers, rounded in the pool's favour.
    With strict=True a deposit off the pool ratio by more than
    ratio_tolerance_bps is rejected instead of trimmed.
    """
    err = validate_amount(yes_amount, 'yes_amount', allow_zero=True) \
        or validate_amount(no_amount, 'no_amount', allow_zero=True) \
        or validate_reserves(reserves) \
        or validate_amount(total_lp_supply, 'total_lp_supply', allow_zero=True)
    for value, field in ((yes_amount, 'yes_amount'), (no_amount, 'no_amount')):
        if err is None and as_raw(value) < min_liquidity:
            err = _too_small(field, min_liquidity)
    if err is not None:
        logger.debug(f"Add liquidity rejected: {err['code']} ({err['field']})")
        return fail(err)

    yes = as_raw(yes_amount)
    no = as_raw(no_amount)
    yes_reserve = as_raw(reserves['yes_reserve'])
    no_reserve = as_raw(reserves['no_reserve'])
    supply = as_raw(total_lp_supply)

    if (yes_reserve == 0 and no_reserve == 0) or supply == 0:
        return ok(LiquidityQuote(yes_amount=yes, no_amount=no, lp_tokens=math.isqrt(yes * no), share_of_pool=100.0))
    if yes_reserve == 0 or no_reserve == 0:
        return fail(_one_sided_pool())

    if strict:
        deviation = ratio_deviation_bps(yes, no, yes_reserve, no_reserve)
        if deviation > ratio_tolerance_bps:
            return fail(calc_error(
                INVALID_RATIO,
                f"Deposit ratio is {deviation} bps off the pool ratio (max: {ratio_tolerance_bps} bps)",
                'no_amount',
            ))

    lp_tokens = min(yes * supply // yes_reserve, no * supply // no_reserve)
    if lp_tokens == 0:
        return fail(_too_small('yes_amount', min_liquidity))

    return ok(LiquidityQuote(
        yes_amount=ceil_div(lp_tokens * yes_reserve, supply),
        no_amount=ceil_div(lp_tokens * no_reserve, supply),
        lp_tokens=lp_tokens,
        share_of_pool=_share_pct(lp_tokens, supply + lp_tokens),
    ))


def calculate_remove_liquidity(lp_tokens: int, reserves: PoolReserves, total_lp_supply: int) -> Result:
    """Pro-rata withdrawal for burning lp_tokens; amounts rounded down."""
    err = validate_amount(lp_tokens, 'lp_tokens') or validate_reserves(reserves) \
        or validate_amount(total_lp_supply, 'total_lp_supply', allow_zero=True)
    if err is not None:
        return fail(err)

    burn = as_raw(lp_tokens)
    supply = as_raw(total_lp_supply)
    yes_reserve = as_raw(reserves['yes_reserve'])
    no_reserve = as_raw(reserves['no_reserve'])

    if burn > supply:
        return fail(calc_error(
            INSUFFICIENT_LP_SUPPLY,
            f"Cannot burn {burn} LP tokens out of a supply of {supply}",
            'lp_tokens',
        ))
    if yes_reserve == 0 and no_reserve == 0:
        return fail(calc_error(INSUFFICIENT_RESERVE, "Pool has no liquidity to withdraw", 'reserves'))

    return ok(RemoveLiquidityQuote(
        lp_tokens=burn,
        yes_amount=burn * yes_reserve // supply,
        no_amount=burn * no_reserve // supply,
        share_of_pool=_share_pct(burn, supply),
    ))
