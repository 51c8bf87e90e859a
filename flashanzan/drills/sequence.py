from __future__ import annotations

"""Constrained random number sequences for flash anzan drills.

Numbers are drawn left to right. Each draw is uniform over the values that
keep the running total non-negative, and the last draw additionally keeps the
final total strictly positive. Out-of-support candidates are redrawn.
"""

import random
from typing import Callable, List, Optional, Protocol, Sequence

SEQUENCE_LENGTH = 8
MAX_ABS = 99


class RandIntSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def _draw(rng: RandIntSource, low: int, high: int, accept: Callable[[int], bool]) -> int:
    # Single-choice support: nothing to sample
    if low > high:
        return low
    num = rng.randint(low, high)
    while not accept(num):
        num = rng.randint(low, high)
    return num


def draw_intermediate(rng: RandIntSource, total: int, max_abs: int = MAX_ABS) -> int:
    """Draw a non-final number that keeps the running total >= 0."""
    low = -max_abs if total >= 0 else 1 - total
    return _draw(rng, low, max_abs, lambda n: total + n >= 0)


def draw_final(rng: RandIntSource, total: int, max_abs: int = MAX_ABS) -> int:
    """Draw the last number so the final total is > 0."""
    if total <= 0:
        return _draw(rng, 1 - total, max_abs, lambda _n: True)
    return _draw(rng, -max_abs, max_abs, lambda n: total + n > 0)


def generate_numbers(rng: Optional[RandIntSource] = None) -> List[int]:
    """Generate one drill sequence.

    Args:
        rng: Object with a ``randint(a, b)`` method. Defaults to the
            ``random`` module, so ``seed_if_needed`` applies.

    Returns:
        ``SEQUENCE_LENGTH`` integers in ``[-MAX_ABS, MAX_ABS]`` whose prefix
        sums are all >= 0 and whose total is > 0.
    """
    rng = rng if rng is not None else random
    numbers: List[int] = []
    total = 0
    for i in range(SEQUENCE_LENGTH):
        if i == SEQUENCE_LENGTH - 1:
            num = draw_final(rng, total)
        else:
            num = draw_intermediate(rng, total)
        numbers.append(num)
        total += num
    return numbers


def prefix_sums(numbers: Sequence[int]) -> List[int]:
    """Running totals after each element."""
    out: List[int] = []
    total = 0
    for n in numbers:
        total += n
        out.append(total)
    return out
