from datetime import date

from config import OVERAGE_RATE
from exceptions import InvalidRange, ValidationError


def rental_days(start: date, end: date) -> int:
    """Number of calendar days in the inclusive span [start, end]."""
    if start > end:
        raise InvalidRange()
    return (end - start).days + 1


def compute_price(
    base_price: int,
    base_duration: int,
    start: date,
    end: date,
    overage_rate: int = OVERAGE_RATE,
) -> int:
    """Price a reservation.

    The base price covers up to ``base_duration`` days; every day beyond that
    adds ``overage_rate``.
    """
    if base_price < 0:
        raise ValidationError("Error: base price must not be negative")
    if base_duration < 1:
        raise ValidationError("Error: base rental duration must be at least one day")

    total_days = rental_days(start, end)
    if total_days <= base_duration:
        return base_price
    return base_price + (total_days - base_duration) * overage_rate
