"""
Deterministic quote engine for YES/NO constant-product pools.

Every function is pure: reserves come in as a PoolReserves snapshot and
results go out as Result dicts, either {'success': True, 'data': ...} or
{'success': False, 'errors': [...]}.
"""
from .reserves import PoolReserves, YES, NO, make_reserves, apply_swap
from .result import Result, CalculationError, ok, fail, unwrap, error_codes
from .prices import Price, Probabilities, calculate_prices, calculate_probabilities, calculate_spot_price
from .swap import (
    SwapQuote,
    calculate_swap_output,
    calculate_trade_quote,
    calculate_swap_input,
    calculate_price_impact,
    calculate_min_output,
    validate_slippage,
    max_swap_input,
    calculate_trade_to_price,
    price_impact_curve,
)
from .liquidity import LiquidityQuote, RemoveLiquidityQuote, calculate_liquidity_quote, calculate_add_liquidity, calculate_remove_liquidity
from .units import to_display_units, to_raw_units, format_percentage, format_price
from .validation import validate_complementary_prices
