from itertools import product

import pytest

from constants import ReservationStatus, VehicleStatus
from exceptions import IllegalTransition, NotEligible, ValidationError
from state_machine import TRANSITIONS, Action, check_transition, transition_for

EXPECTED = {
    Action.ACCEPT: (ReservationStatus.PENDING, ReservationStatus.ACCEPTED, VehicleStatus.BOOKED),
    Action.CONFIRM: (ReservationStatus.ACCEPTED, ReservationStatus.CONFIRMED, VehicleStatus.NOT_AVAILABLE),
    Action.MARK_RETURNED: (ReservationStatus.CONFIRMED, ReservationStatus.RETURNED, VehicleStatus.AVAILABLE),
    Action.CONFIRM_RETURN: (ReservationStatus.RETURNED, ReservationStatus.RETURNED, None),
    Action.CANCEL: (ReservationStatus.PENDING, ReservationStatus.CANCELLED, VehicleStatus.AVAILABLE),
}


def test_every_action_has_a_transition():
    assert set(TRANSITIONS) == set(Action)


@pytest.mark.parametrize("action", list(Action))
def test_transition_table(action):
    source, target, vehicle_status = EXPECTED[action]
    transition = check_transition(source, action)

    assert transition.target == target
    assert transition.vehicle_status == vehicle_status


def test_only_cancel_is_open_to_customers():
    assert [a for a, t in TRANSITIONS.items() if not t.staff_only] == [Action.CANCEL]


@pytest.mark.parametrize("status,action", [
    (status, action)
    for status, action in product(ReservationStatus, Action)
    if status != EXPECTED[action][0]
])
def test_wrong_source_status_is_rejected(status, action):
    with pytest.raises(IllegalTransition):
        check_transition(status, action)


def test_illegal_transition_is_not_eligible():
    with pytest.raises(NotEligible):
        check_transition(ReservationStatus.ACCEPTED, Action.CANCEL)


def test_actions_accept_their_wire_names():
    assert transition_for("mark-returned").action == Action.MARK_RETURNED
    assert transition_for("confirm-return").action == Action.CONFIRM_RETURN


def test_unknown_action_is_a_validation_error():
    with pytest.raises(ValidationError):
        transition_for("reopen")
