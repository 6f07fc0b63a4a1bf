"""
Pool prices and probabilities.

A YES/NO pool prices each side by its share of the combined reserves:

    yes = yes_reserve / (yes_reserve + no_reserve)
    no  = 1 - yes

so a pool holding 400_000 YES and 600_000 NO quotes YES at 0.4 and NO at 0.6.
NO is derived from YES rather than divided separately, which keeps the pair
complementary under any rounding.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing_extensions import TypedDict

from amm_quotes.utils import engine_context
from .reserves import PoolReserves
from .result import Result, fail, ok
from .validation import as_raw, validate_reserve, validate_reserves

logger = logging.getLogger(__name__)

NO_LIQUIDITY_PRICE = Decimal('0.5')


class Price(TypedDict):
    yes: float
    no: float


class Probabilities(TypedDict):
    yes: int
    no: int


def yes_price_decimal(yes_reserve: int, no_reserve: int) -> Decimal:
    total = yes_reserve + no_reserve
    if total == 0:
        return NO_LIQUIDITY_PRICE
    with engine_context():
        return Decimal(yes_reserve) / Decimal(total)


def calculate_prices(reserves: PoolReserves) -> Result:
    err = validate_reserves(reserves)
    if err is not None:
        logger.debug(f"Price calculation rejected: {err['code']}")
        return fail(err)

    yes = yes_price_decimal(as_raw(reserves['yes_reserve']), as_raw(reserves['no_reserve']))
    with engine_context():
        no = Decimal(1) - yes
    return ok(Price(yes=float(yes), no=float(no)))


def calculate_probabilities(reserves: PoolReserves) -> Result:
    """
    Prices as whole percentages. YES is rounded half-up and NO takes the
    remainder, so the pair always sums to exactly 100.
    """
    err = validate_reserves(reserves)
    if err is not None:
        return fail(err)

    yes = yes_price_decimal(as_raw(reserves['yes_reserve']), as_raw(reserves['no_reserve']))
    with engine_context():
        yes_pct = int((yes * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return ok(Probabilities(yes=yes_pct, no=100 - yes_pct))


def calculate_spot_price(reserve_a: int, reserve_b: int) -> Result:
    """Marginal price of token A in units of token B: reserve_b / reserve_a."""
    err = validate_reserve(reserve_a, 'reserve_a') or validate_reserve(reserve_b, 'reserve_b')
    if err is not None:
        return fail(err)
    with engine_context():
        spot = Decimal(as_raw(reserve_b)) / Decimal(as_raw(reserve_a))
    return ok(float(spot))

