from decimal import Decimal

import pytest

from app.services import progress_calculator


def test_empty_course_is_complete():
    assert progress_calculator.calculate_percentage(0, 0) == Decimal("100.00")
    assert progress_calculator.is_complete(0, 0) is True


def test_half_way_is_fifty_percent():
    assert progress_calculator.calculate_percentage(4, 2) == Decimal("50.00")
    assert progress_calculator.is_complete(4, 2) is False


def test_rounds_half_up_to_two_places():
    assert progress_calculator.calculate_percentage(3, 1) == Decimal("33.33")
    assert progress_calculator.calculate_percentage(3, 2) == Decimal("66.67")
    assert progress_calculator.calculate_percentage(8, 1) == Decimal("12.50")


def test_all_lessons_done_is_complete():
    assert progress_calculator.calculate_percentage(7, 7) == Decimal("100.00")
    assert progress_calculator.is_complete(7, 7) is True


@pytest.mark.parametrize("total", [1, 2, 3, 7, 10, 33])
def test_percentage_stays_within_bounds(total):
    for completed in range(total + 1):
        percentage = progress_calculator.calculate_percentage(total, completed)
        assert Decimal("0") <= percentage <= Decimal("100")
