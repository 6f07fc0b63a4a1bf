"""Raw fixed-point <-> display unit conversion and display formatting."""
from decimal import Decimal, ROUND_HALF_UP

from amm_quotes.utils import ENGINE_CONTEXT, TOKEN_DECIMALS, to_decimal


def _check_decimals(decimals: int) -> None:
    if decimals < 0:
        raise ValueError(f"Invalid decimals: {decimals}. Must be non-negative.")


def to_display_units(raw: int, decimals: int = TOKEN_DECIMALS) -> float:
    """raw / 10**decimals, e.g. 1_234_567 -> 1.234567."""
    _check_decimals(decimals)
    return float(Decimal(raw).scaleb(-decimals, context=ENGINE_CONTEXT))


def to_raw_units(display: float, decimals: int = TOKEN_DECIMALS) -> int:
    """
    round(display * 10**decimals), rounding half away from zero.

    The product is taken on the decimal form of display rather than on the
    binary float, so to_raw_units(to_display_units(raw)) == raw for any raw
    below 10**15.
    """
    _check_decimals(decimals)
    scaled = to_decimal(display).scaleb(decimals, context=ENGINE_CONTEXT)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP, context=ENGINE_CONTEXT))


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def format_price(value: float, decimals: int = 3, symbol: str = 'APT') -> str:
    return f"{value:.{decimals}f} {symbol}"
