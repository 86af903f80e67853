"""
Legal reservation transitions and the car status each one leaves behind.

The car's status is a projection of its committed reservation, so every
transition names the car status it implies. ``None`` means the car is left
as it is.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from constants import ReservationStatus, VehicleStatus
from exceptions import IllegalTransition, ValidationError


class Action(str, Enum):
    ACCEPT = "accept"
    CONFIRM = "confirm"
    MARK_RETURNED = "mark-returned"
    CONFIRM_RETURN = "confirm-return"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    action: Action
    source: ReservationStatus
    target: ReservationStatus
    vehicle_status: Optional[VehicleStatus]
    staff_only: bool


TRANSITIONS = {
    Action.ACCEPT: Transition(
        Action.ACCEPT,
        ReservationStatus.PENDING,
        ReservationStatus.ACCEPTED,
        VehicleStatus.BOOKED,
        staff_only=True,
    ),
    Action.CONFIRM: Transition(
        Action.CONFIRM,
        ReservationStatus.ACCEPTED,
        ReservationStatus.CONFIRMED,
        VehicleStatus.NOT_AVAILABLE,
        staff_only=True,
    ),
    Action.MARK_RETURNED: Transition(
        Action.MARK_RETURNED,
        ReservationStatus.CONFIRMED,
        ReservationStatus.RETURNED,
        VehicleStatus.AVAILABLE,
        staff_only=True,
    ),
    # Only the return record changes; the reservation stays returned
    Action.CONFIRM_RETURN: Transition(
        Action.CONFIRM_RETURN,
        ReservationStatus.RETURNED,
        ReservationStatus.RETURNED,
        None,
        staff_only=True,
    ),
    # Car is freed only if no other committed reservation holds it
    Action.CANCEL: Transition(
        Action.CANCEL,
        ReservationStatus.PENDING,
        ReservationStatus.CANCELLED,
        VehicleStatus.AVAILABLE,
        staff_only=False,
    ),
}


def transition_for(action: Action) -> Transition:
    try:
        return TRANSITIONS[Action(action)]
    except (KeyError, ValueError):
        raise ValidationError(f"Error: unknown action '{action}'")


def check_transition(current: ReservationStatus, action: Action) -> Transition:
    """Return the transition for ``action`` if it may start from ``current``."""
    transition = transition_for(action)
    if current != transition.source:
        raise IllegalTransition(
            f"Error: cannot {transition.action.value} a reservation that is {current.value}"
        )
    return transition