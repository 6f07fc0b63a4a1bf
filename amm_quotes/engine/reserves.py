from typing import Tuple
from typing_extensions import TypedDict

YES = 'YES'
NO = 'NO'


class PoolReserves(TypedDict):
    """Snapshot of a YES/NO pool in raw fixed-point units (10^6 per token)."""
    yes_reserve: int
    no_reserve: int


def make_reserves(yes_reserve: int, no_reserve: int) -> PoolReserves:
    return {'yes_reserve': yes_reserve, 'no_reserve': no_reserve}


def get_swap_reserves(reserves: PoolReserves, input_side: str) -> Tuple[int, int]:
    """
    Return (input_reserve, output_reserve) for a swap that sells input_side
    into the pool.
    """
    if input_side == YES:
        return reserves['yes_reserve'], reserves['no_reserve']
    if input_side == NO:
        return reserves['no_reserve'], reserves['yes_reserve']
    raise ValueError(f"Invalid side: {input_side}. Must be 'YES' or 'NO'.")


def apply_swap(reserves: PoolReserves, input_side: str, input_amount: int, output_amount: int) -> PoolReserves:
    """
    Reserves after a swap. The full input, fee included, stays in the pool.
    Returns a new snapshot; the argument is left untouched.
    """
    input_reserve, output_reserve = get_swap_reserves(reserves, input_side)
    if output_amount > output_reserve:
        raise ValueError(f"Output {output_amount} exceeds reserve {output_reserve}")
    new_in = input_reserve + input_amount
    new_out = output_reserve - output_amount
    if input_side == YES:
        return make_reserves(new_in, new_out)
    return make_reserves(new_out, new_in)
