import numpy as np
import pytest

from amm_quotes.engine.amm_math import constant_product_output, verify_invariant
from amm_quotes.engine.prices import calculate_prices
from amm_quotes.engine.reserves import NO, YES, PoolReserves, apply_swap, make_reserves
from amm_quotes.engine.result import error_codes, unwrap
from amm_quotes.engine.swap import (
    calculate_min_output,
    calculate_price_impact,
    calculate_swap_input,
    calculate_swap_output,
    calculate_trade_quote,
    calculate_trade_to_price,
    max_swap_input,
    price_impact_curve,
    validate_slippage,
)
from amm_quotes.engine.validation import validate_complementary_prices

RESERVE = 1_000_000


@pytest.fixture
def reserves() -> PoolReserves:
    return make_reserves(RESERVE, RESERVE)


def test_swap_output_with_fee():
    result = calculate_swap_output(100_000, RESERVE, RESERVE)
    assert result['success']
    quote = result['data']
    # 1_000_000 * 99_700 / 1_099_700, rounded down
    assert 90_000 < quote['output_amount'] < 100_000
    assert quote['output_amount'] == 90_661
    assert quote['fee'] == 300
    assert quote['input_amount'] == 100_000
    assert quote['effective_price'] == pytest.approx(0.90661)
    assert quote['price_impact'] == pytest.approx(9.3389, abs=1e-3)


def test_swap_output_amounts_are_integers():
    quote = unwrap(calculate_swap_output(123_457, 987_651, 1_234_567))
    for key in ('input_amount', 'output_amount', 'fee', 'minimum_output'):
        assert isinstance(quote[key], int)


def test_swap_minimum_output_applies_slippage():
    quote = unwrap(calculate_swap_output(100_000, RESERVE, RESERVE))
    assert quote['minimum_output'] == 89_754
    assert quote['minimum_output'] == pytest.approx(quote['output_amount'] * 0.99, abs=1)
    assert quote['minimum_output'] <= quote['output_amount']


def test_swap_custom_slippage():
    quote = unwrap(calculate_swap_output(100_000, RESERVE, RESERVE, slippage_bps=0))
    assert quote['minimum_output'] == quote['output_amount']


def test_swap_price_impact_for_large_trade():
    quote = unwrap(calculate_swap_output(200_000, RESERVE, RESERVE))
    assert 5 < quote['price_impact'] < 20


def test_swap_small_trade_has_minimal_impact():
    quote = unwrap(calculate_swap_output(1_000, RESERVE, RESERVE))
    # the 0.3% fee alone sets the floor
    assert quote['price_impact'] < 0.5


def test_swap_rejects_excessive_price_impact():
    result = calculate_swap_output(5_000_000, RESERVE, RESERVE)
    assert not result['success']
    assert result['errors'][0]['code'] == 'EXCESSIVE_PRICE_IMPACT'


def test_swap_custom_impact_ceiling():
    result = calculate_swap_output(200_000, RESERVE, RESERVE, max_price_impact=10)
    assert error_codes(result) == ['EXCESSIVE_PRICE_IMPACT']


@pytest.mark.parametrize('ceiling', [float('nan'), float('inf'), -1])
def test_swap_rejects_unusable_impact_ceiling(ceiling):
    with pytest.raises(ValueError, match="Invalid max_price_impact"):
        calculate_swap_output(1_000, RESERVE, RESERVE, max_price_impact=ceiling)
    with pytest.raises(ValueError):
        max_swap_input(RESERVE, max_price_impact=ceiling)


def test_price_impact_strictly_increases_with_input():
    amounts = [1_000, 1_001, 1_002, 50_000, 50_001, 200_000, 200_001, 900_000]
    impacts = [unwrap(calculate_price_impact(a, RESERVE, RESERVE)) for a in amounts]
    assert all(b > a for a, b in zip(impacts, impacts[1:]))


def test_swap_dust_produces_no_output():
    result = calculate_swap_output(1, RESERVE, RESERVE)
    assert error_codes(result) == ['AMOUNT_TOO_SMALL']


@pytest.mark.parametrize('args, code, field', [
    ((0, RESERVE, RESERVE), 'INVALID_AMOUNT', 'input_amount'),
    ((-5, RESERVE, RESERVE), 'INVALID_AMOUNT', 'input_amount'),
    ((100, 0, RESERVE), 'INVALID_RESERVE', 'input_reserve'),
    ((100, RESERVE, -1), 'INVALID_RESERVE', 'output_reserve'),
    ((-5, 0, 0), 'INVALID_AMOUNT', 'input_amount'),
])
def test_swap_validation(args, code, field):
    result = calculate_swap_output(*args)
    assert len(result['errors']) == 1
    assert result['errors'][0]['code'] == code
    assert result['errors'][0]['field'] == field


def test_swap_rejects_slippage_above_cap():
    result = calculate_swap_output(100_000, RESERVE, RESERVE, slippage_bps=6_000)
    assert error_codes(result) == ['INVALID_SLIPPAGE']


def test_trade_quote_uses_side(reserves):
    skewed = make_reserves(400_000, 600_000)
    yes_in = unwrap(calculate_trade_quote(skewed, YES, 10_000))
    no_in = unwrap(calculate_trade_quote(skewed, NO, 10_000))
    assert yes_in == unwrap(calculate_swap_output(10_000, 400_000, 600_000))
    assert no_in == unwrap(calculate_swap_output(10_000, 600_000, 400_000))


def test_trade_quote_rejects_bad_side(reserves):
    result = calculate_trade_quote(reserves, 'MAYBE', 10_000)
    assert error_codes(result) == ['INVALID_SIDE']


def test_trade_quote_rejects_bad_reserves():
    result = calculate_trade_quote(make_reserves(-1, 10), YES, 10_000)
    assert error_codes(result) == ['INVALID_YES_RESERVE']


def test_swap_input_inverts_output():
    required = unwrap(calculate_swap_input(90_661, RESERVE, RESERVE))
    assert constant_product_output(required, RESERVE, RESERVE, 30) >= 90_661
    assert constant_product_output(required - 1, RESERVE, RESERVE, 30) < 90_661


def test_swap_input_rejects_draining_the_pool():
    result = calculate_swap_input(RESERVE, RESERVE, RESERVE)
    assert error_codes(result) == ['INSUFFICIENT_RESERVE']


def test_price_impact_has_no_ceiling():
    impact = unwrap(calculate_price_impact(5_000_000, RESERVE, RESERVE))
    assert impact == pytest.approx(83.3417, abs=1e-3)


def test_calculate_min_output():
    assert unwrap(calculate_min_output(90_661)) == 89_754
    assert unwrap(calculate_min_output(90_661, 500)) == 86_127
    assert error_codes(calculate_min_output(90_661, 5_001)) == ['INVALID_SLIPPAGE']


def test_validate_slippage():
    assert validate_slippage(90_661, 89_754, 100)
    assert not validate_slippage(90_661, 89_000, 100)
    assert not validate_slippage(90_661, 90_661, 6_000)


def test_max_swap_input_matches_ceiling():
    limit = unwrap(max_swap_input(RESERVE))
    assert limit == 996_990
    assert calculate_swap_output(limit, RESERVE, RESERVE)['success']
    assert error_codes(calculate_swap_output(limit + 1, RESERVE, RESERVE)) == ['EXCESSIVE_PRICE_IMPACT']


def test_trade_to_price_moves_yes_up(reserves):
    trade = unwrap(calculate_trade_to_price(reserves, 0.6))
    assert trade['input_side'] == YES
    quote = unwrap(calculate_trade_quote(reserves, YES, trade['input_amount']))
    after = apply_swap(reserves, YES, trade['input_amount'], quote['output_amount'])
    assert unwrap(calculate_prices(after))['yes'] == pytest.approx(0.6, abs=1e-3)


def test_trade_to_price_moves_yes_down(reserves):
    trade = unwrap(calculate_trade_to_price(reserves, 0.3))
    assert trade['input_side'] == NO
    quote = unwrap(calculate_trade_quote(reserves, NO, trade['input_amount']))
    after = apply_swap(reserves, NO, trade['input_amount'], quote['output_amount'])
    assert unwrap(calculate_prices(after))['yes'] == pytest.approx(0.3, abs=1e-3)


def test_trade_to_price_validation(reserves):
    assert error_codes(calculate_trade_to_price(reserves, 1.0)) == ['INVALID_PRICE']
    assert error_codes(calculate_trade_to_price(make_reserves(0, 0), 0.5)) == ['INSUFFICIENT_RESERVE']


def test_price_impact_curve_matches_quotes():
    amounts = [1_000, 100_000, 200_000, 5_000_000]
    curve = price_impact_curve(amounts, RESERVE)
    expected = [unwrap(calculate_price_impact(a, RESERVE, RESERVE)) for a in amounts]
    assert np.allclose(curve, expected)
    assert np.all(np.diff(curve) > 0)


def test_price_impact_curve_rejects_empty_reserve():
    with pytest.raises(ValueError):
        price_impact_curve([1_000], 0)


def test_prices_stay_complementary_through_swaps(reserves):
    # sell NO into the pool, YES comes out
    quote = unwrap(calculate_trade_quote(reserves, NO, 100_000))
    after_first = apply_swap(reserves, NO, 100_000, quote['output_amount'])
    assert after_first == make_reserves(RESERVE - quote['output_amount'], RESERVE + 100_000)
    assert verify_invariant(RESERVE, RESERVE, after_first['no_reserve'], after_first['yes_reserve'])

    prices = unwrap(calculate_prices(after_first))
    assert prices['yes'] < 0.5 < prices['no']

    quote = unwrap(calculate_trade_quote(after_first, YES, 50_000))
    after_second = apply_swap(after_first, YES, 50_000, quote['output_amount'])
    prices = unwrap(calculate_prices(after_second))
    assert validate_complementary_prices(prices['yes'], prices['no'])
    assert verify_invariant(
        after_first['yes_reserve'], after_first['no_reserve'],
        after_second['yes_reserve'], after_second['no_reserve'],
    )
