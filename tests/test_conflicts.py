from datetime import date, timedelta
from itertools import product

import pytest

from conflicts import has_conflict, overlaps
from constants import ReservationStatus
from records import DateSpan
import lifecycle


def span(first, last):
    base = date(2030, 11, 1)
    return DateSpan(base + timedelta(days=first), base + timedelta(days=last))


def test_shared_boundary_day_is_an_overlap():
    assert overlaps(span(1, 5), span(5, 9))
    assert overlaps(span(5, 9), span(1, 5))


def test_adjacent_spans_do_not_overlap():
    assert not overlaps(span(1, 5), span(6, 9))
    assert not overlaps(span(6, 9), span(1, 5))


def test_containment_overlaps():
    assert overlaps(span(1, 10), span(3, 4))
    assert overlaps(span(3, 4), span(1, 10))


def test_overlap_is_symmetric():
    spans = [span(a, b) for a in range(0, 6) for b in range(a, 8)]
    for first, second in product(spans, repeat=2):
        assert overlaps(first, second) == overlaps(second, first)


@pytest.fixture
def car(make_car):
    return make_car()


def reserve(db, actor, car, first, last):
    s = span(first, last)
    return lifecycle.create_reservation(db, actor, car.car_uid, "Trip", s.start, s.end)


def test_pending_reservation_blocks_its_dates(db, customer, car):
    reserve(db, customer, car, 1, 5)

    assert has_conflict(db, car.id, span(5, 9).start, span(5, 9).end)
    assert not has_conflict(db, car.id, span(6, 9).start, span(6, 9).end)


def test_other_cars_never_conflict(db, customer, car, make_car):
    other = make_car(name="Honda Jazz", type="SEDAN")
    reserve(db, customer, car, 1, 5)

    assert not has_conflict(db, other.id, span(1, 5).start, span(1, 5).end)


def test_returned_reservation_frees_its_dates(db, customer, staff, car):
    reservation = reserve(db, customer, car, 1, 5)
    for action in ("accept", "confirm", "mark-returned"):
        lifecycle.advance(db, staff, reservation.booking_uid, action)

    assert not has_conflict(db, car.id, span(1, 5).start, span(1, 5).end)


def test_cancelled_reservation_frees_its_dates(db, customer, car):
    reservation = reserve(db, customer, car, 1, 5)
    lifecycle.advance(db, customer, reservation.booking_uid, "cancel")

    assert not has_conflict(db, car.id, span(1, 5).start, span(1, 5).end)


def test_only_given_statuses_are_considered(db, customer, car):
    reserve(db, customer, car, 1, 5)

    assert not has_conflict(
        db, car.id, span(1, 5).start, span(1, 5).end,
        active_statuses=[ReservationStatus.ACCEPTED, ReservationStatus.CONFIRMED],
    )
