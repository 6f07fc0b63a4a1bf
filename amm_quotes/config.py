import logging
import os
from typing import Callable, Dict

from dotenv import load_dotenv

from amm_quotes.engine.params import EngineParams, get_default_engine_params, validate_params

ENV_PREFIX = 'AMM_'

_ENV_FIELDS: Dict[str, Callable[[str], object]] = {
    'fee_bps': int,
    'slippage_bps': int,
    'max_slippage_bps': int,
    'max_price_impact_pct': float,
    'min_liquidity': int,
    'ratio_tolerance_bps': int,
    'token_decimals': int,
    'price_sum_tolerance': float,
}


def load_env() -> dict[str, str]:
    """AMM_* overrides from the environment, after loading a local .env if present."""
    load_dotenv()
    env_vars = {}
    for key in _ENV_FIELDS:
        value = os.getenv(ENV_PREFIX + key.upper())
        if value is not None:
            env_vars[key] = value
    return env_vars


def load_engine_params() -> EngineParams:
    params = get_default_engine_params()
    for key, raw in load_env().items():
        try:
            params[key] = _ENV_FIELDS[key](raw)
        except ValueError:
            raise ValueError(f"Invalid value for {ENV_PREFIX}{key.upper()}: {raw!r}")
    validate_params(params)
    return params


def configure_logging(level: str | None = None) -> None:
    level_name = (level or os.getenv(ENV_PREFIX + 'LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def swap_kwargs(params: EngineParams) -> dict:
    """Keyword arguments for calculate_swap_output and calculate_trade_quote."""
    return {
        'fee_bps': params['fee_bps'],
        'slippage_bps': params['slippage_bps'],
        'max_price_impact': params['max_price_impact_pct'],
    }


def liquidity_kwargs(params: EngineParams) -> dict:
    """Keyword arguments for calculate_liquidity_quote and calculate_add_liquidity."""
    return {'min_liquidity': params['min_liquidity']}
