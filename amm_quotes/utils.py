import json
from decimal import Context, Decimal, ROUND_CEILING, ROUND_HALF_EVEN, localcontext
from typing import Any, Dict

import mpmath as mp
import numpy as np

TOKEN_DECIMALS = 6
BPS_DIVISOR = 10_000

# Every Decimal computation in the engine runs in this context so that results
# never depend on whatever the caller did to the thread's global context.
ENGINE_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)
MP_DPS = 30


def engine_context():
    return localcontext(ENGINE_CONTEXT)


def to_decimal(value: int | float | str | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr gives the shortest string that round-trips to the same float
        return Decimal(repr(value))
    return Decimal(value)


def ceil_int(d: Decimal) -> int:
    return int(d.to_integral_value(rounding=ROUND_CEILING))


def ceil_div(num: int, den: int) -> int:
    if den == 0:
        raise ValueError("Division by zero.")
    return -(-num // den)


def safe_divide(num: Decimal, den: Decimal) -> Decimal:
    if den == Decimal(0):
        raise ValueError("Division by zero.")
    with engine_context():
        return num / den


def decimal_sqrt(d: Decimal) -> Decimal:
    if d < Decimal(0):
        raise ValueError("Cannot take square root of negative value.")
    with mp.workdps(MP_DPS):
        return Decimal(str(mp.sqrt(mp.mpf(str(d)))))


def validate_bps(bps: int, name: str) -> None:
    if not (0 <= bps < BPS_DIVISOR):
        raise ValueError(f"Invalid {name}: {bps}. Must be in [0, {BPS_DIVISOR}).")


def serialize_result(result: Dict[str, Any]) -> str:
    """JSON encoding for quote results handed to the UI layer."""
    def default_handler(obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (np.float64, np.float32)):
            return float(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
    return json.dumps(result, default=default_handler)


def deserialize_result(json_str: str) -> Dict[str, Any]:
    return json.loads(json_str)
