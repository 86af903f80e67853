"""
Closed status enumerations shared by the models, the gateway and the state machine.
"""
from enum import Enum

DATE_FMT = "%Y-%m-%d"


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    NOT_AVAILABLE = "not-available"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CONFIRMED = "confirmed"
    RETURNED = "returned"
    CANCELLED = "cancelled"


# Statuses that still hold a claim on the car's calendar
ACTIVE_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.ACCEPTED,
    ReservationStatus.CONFIRMED,
})

# Statuses in which staff have committed the car to a reservation
COMMITTED_STATUSES = frozenset({
    ReservationStatus.ACCEPTED,
    ReservationStatus.CONFIRMED,
})

CAR_TYPES = ("SEDAN", "SUV", "MINIVAN", "ROADSTER", "HATCHBACK", "PICKUP")


def check_values(enum_cls) -> str:
    return ", ".join(f"'{member.value}'" for member in enum_cls)
