from datetime import date, timedelta

import pytest

from config import OVERAGE_RATE
from exceptions import InvalidRange, ValidationError
from pricing import compute_price, rental_days

DAY0 = date(2030, 11, 1)


def days_after(n):
    return DAY0 + timedelta(days=n)


def test_span_within_base_duration_costs_base_price():
    assert compute_price(100, 5, DAY0, days_after(4)) == 100


def test_each_day_past_base_duration_adds_overage():
    assert compute_price(100, 5, DAY0, days_after(6)) == 100 + 2 * OVERAGE_RATE


def test_single_day_reservation():
    assert rental_days(DAY0, DAY0) == 1
    assert compute_price(250, 1, DAY0, DAY0) == 250


def test_span_equal_to_base_duration_has_no_surcharge():
    assert compute_price(100, 3, DAY0, days_after(2)) == 100
    assert compute_price(100, 3, DAY0, days_after(3)) == 100 + OVERAGE_RATE


def test_custom_overage_rate():
    assert compute_price(1000, 2, DAY0, days_after(4), overage_rate=15) == 1000 + 3 * 15


def test_price_never_decreases_as_end_moves_later():
    for base_price, base_duration in [(0, 1), (100, 5), (500000, 3), (7, 30)]:
        prices = [
            compute_price(base_price, base_duration, DAY0, days_after(n))
            for n in range(60)
        ]
        assert prices == sorted(prices)


def test_start_after_end_is_invalid_range():
    with pytest.raises(InvalidRange):
        compute_price(100, 5, days_after(1), DAY0)


def test_invalid_range_is_a_validation_error():
    with pytest.raises(ValidationError):
        rental_days(days_after(3), DAY0)


@pytest.mark.parametrize("base_price,base_duration", [(-1, 5), (100, 0)])
def test_rejects_bad_car_pricing(base_price, base_duration):
    with pytest.raises(ValidationError):
        compute_price(base_price, base_duration, DAY0, days_after(1))
