from datetime import date

import pytest

from src.settlement_engine.settlement_engine.common.datetime_utils import (
    add_months,
    month_bounds,
    months_between,
    overlap,
    parse_iso_date,
)
from src.settlement_engine.settlement_engine.common.money import percent_factor, round_minor
from src.settlement_engine.settlement_engine.common.validators import require_positive_amount
from src.settlement_engine.settlement_engine.core.exceptions import InvalidAmountError, ValidationError


def test_month_bounds_handles_leap_february():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2025-02") == (date(2025, 2, 1), date(2025, 2, 28))


@pytest.mark.parametrize("value", ["2024-2", "2024-00", "24-01", "", None])
def test_month_bounds_rejects_bad_keys(value):
    with pytest.raises(ValidationError):
        month_bounds(value)


def test_months_between_ignores_day_of_month():
    assert months_between(date(2024, 4, 20), date(2024, 6, 1)) == 2
    assert months_between(date(2024, 1, 31), date(2024, 1, 1)) == 0
    assert months_between(date(2024, 11, 1), date(2025, 2, 1)) == 3
    assert months_between(date(2024, 6, 1), date(2024, 1, 1)) == 0


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 10), 3) == date(2025, 2, 10)


def test_overlap():
    assert overlap(date(2025, 1, 30), date(2025, 2, 2), date(2025, 2, 1), date(2025, 2, 28)) == (
        date(2025, 2, 1),
        date(2025, 2, 2),
    )
    assert overlap(date(2025, 1, 1), date(2025, 1, 5), date(2025, 2, 1), date(2025, 2, 28)) is None


def test_parse_iso_date():
    assert parse_iso_date("2024-03-01") == date(2024, 3, 1)
    with pytest.raises(ValidationError):
        parse_iso_date("03/01/2024")


def test_round_minor_rounds_half_away_from_zero():
    assert round_minor(2.5) == 3
    assert round_minor(-2.5) == -3
    assert percent_factor(15) * 100 == 85


def test_require_positive_amount_rejects_bool_and_float():
    with pytest.raises(InvalidAmountError):
        require_positive_amount(True)
    with pytest.raises(InvalidAmountError):
        require_positive_amount(1.0)
    assert require_positive_amount(7) == 7
