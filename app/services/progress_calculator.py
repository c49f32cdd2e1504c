"""Completion percentage for a course, from lesson counts.

A course without lessons counts as finished: ``calculate_percentage(0, 0)``
is 100.
"""
from decimal import Decimal, ROUND_HALF_UP

HUNDRED = Decimal("100")
_TWO_PLACES = Decimal("0.01")


def calculate_percentage(total_lessons: int, completed_lessons: int) -> Decimal:
    if total_lessons == 0:
        return HUNDRED.quantize(_TWO_PLACES)
    ratio = Decimal(completed_lessons) / Decimal(total_lessons) * HUNDRED
    return ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def is_complete(total_lessons: int, completed_lessons: int) -> bool:
    return calculate_percentage(total_lessons, completed_lessons) >= HUNDRED
