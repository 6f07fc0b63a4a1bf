from typing_extensions import TypedDict

from amm_quotes.utils import BPS_DIVISOR, TOKEN_DECIMALS

# Pool fee deducted from every swap input, 30 bps = 0.3%
FEE_BPS = 30
# 1% slippage allowance used for minimum_output
DEFAULT_SLIPPAGE_BPS = 100
MAX_SLIPPAGE_BPS = 5_000
# Swaps moving execution price more than this far from spot are rejected
MAX_PRICE_IMPACT_PCT = 50
# 0.001 tokens at 6 decimals
MIN_LIQUIDITY = 1_000
# Allowed ratio deviation for strict two-sided deposits
RATIO_TOLERANCE_BPS = 50
PRICE_SUM_TOLERANCE = 1e-4


class EngineParams(TypedDict):
    """Tunable constants of the quote engine.

    Amount-like fields are raw fixed-point integers, rate-like fields are basis
    points, except max_price_impact_pct which is a percentage to match the
    price_impact field of a swap quote.
    """
    fee_bps: int
    slippage_bps: int
    max_slippage_bps: int
    max_price_impact_pct: float
    min_liquidity: int
    ratio_tolerance_bps: int
    token_decimals: int
    price_sum_tolerance: float


def get_default_engine_params() -> EngineParams:
    return EngineParams(
        fee_bps=FEE_BPS,
        slippage_bps=DEFAULT_SLIPPAGE_BPS,
        max_slippage_bps=MAX_SLIPPAGE_BPS,
        max_price_impact_pct=MAX_PRICE_IMPACT_PCT,
        min_liquidity=MIN_LIQUIDITY,
        ratio_tolerance_bps=RATIO_TOLERANCE_BPS,
        token_decimals=TOKEN_DECIMALS,
        price_sum_tolerance=PRICE_SUM_TOLERANCE,
    )


def validate_params(params: EngineParams) -> None:
    if not (0 <= params['fee_bps'] < BPS_DIVISOR):
        raise ValueError("fee_bps must be in [0,10000)")
    if not (0 < params['max_slippage_bps'] < BPS_DIVISOR):
        raise ValueError("max_slippage_bps must be in (0,10000)")
    if not (0 <= params['slippage_bps'] <= params['max_slippage_bps']):
        raise ValueError("slippage_bps must be in [0,max_slippage_bps]")
    # 20% of the pool already costs ~16.9% impact, 5x the pool ~83.3%
    if not (20 <= params['max_price_impact_pct'] <= 80):
        raise ValueError("max_price_impact_pct must be in [20,80]")
    if params['min_liquidity'] <= 0:
        raise ValueError("min_liquidity must be >0")
    if not (0 <= params['ratio_tolerance_bps'] < BPS_DIVISOR):
        raise ValueError("ratio_tolerance_bps must be in [0,10000)")
    if not (0 <= params['token_decimals'] <= 18):
        raise ValueError("token_decimals must be in [0,18]")
    if not (0 < params['price_sum_tolerance'] < 1):
        raise ValueError("price_sum_tolerance must be in (0,1)")
