from typing import Any, List, Literal, Union
from typing_extensions import TypedDict

INVALID_YES_RESERVE = 'INVALID_YES_RESERVE'
INVALID_NO_RESERVE = 'INVALID_NO_RESERVE'
INVALID_RESERVE = 'INVALID_RESERVE'
INVALID_AMOUNT = 'INVALID_AMOUNT'
INVALID_PRICE = 'INVALID_PRICE'
INVALID_SLIPPAGE = 'INVALID_SLIPPAGE'
INVALID_RATIO = 'INVALID_RATIO'
INVALID_SIDE = 'INVALID_SIDE'
AMOUNT_TOO_SMALL = 'AMOUNT_TOO_SMALL'
EXCESSIVE_PRICE_IMPACT = 'EXCESSIVE_PRICE_IMPACT'
INSUFFICIENT_RESERVE = 'INSUFFICIENT_RESERVE'
INSUFFICIENT_LP_SUPPLY = 'INSUFFICIENT_LP_SUPPLY'


class CalculationError(TypedDict):
    code: str
    message: str
    field: str


class Success(TypedDict):
    success: Literal[True]
    data: Any


class Failure(TypedDict):
    success: Literal[False]
    errors: List[CalculationError]


Result = Union[Success, Failure]


def calc_error(code: str, message: str, field: str) -> CalculationError:
    return {'code': code, 'message': message, 'field': field}


def ok(data: Any) -> Success:
    return {'success': True, 'data': data}


def fail(*errors: CalculationError) -> Failure:
    if not errors:
        raise ValueError("A failed result needs at least one error.")
    return {'success': False, 'errors': list(errors)}


def error_codes(result: Result) -> List[str]:
    if result['success']:
        return []
    return [e['code'] for e in result['errors']]


def unwrap(result: Result) -> Any:
    """
    Return the data of a successful result.

    For call sites where a failure can only mean an internal invariant broke;
    caller-input failures should be rendered from the errors instead.
    """
    if not result['success']:
        raise ValueError(f"Calculation failed: {error_codes(result)}")
    return result['data']
