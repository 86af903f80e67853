"""
Error types raised by the reservation core.

Every failure the core reports is a ReservationError subclass, so the HTTP
layer can map them to responses without catching anything broader.
"""


class ReservationError(Exception):
    """Base class for errors reported to the caller as a definitive rejection."""

    default_message = "Error: reservation request rejected"

    def __init__(self, message: str = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationError(ReservationError):
    """Raised when required input is missing or malformed."""

    default_message = "Error: invalid request"


class InvalidRange(ValidationError):
    """Raised when a start date falls after its end date."""

    default_message = "Error: start date must not be after end date"


class NotFound(ReservationError):
    """Raised when a car or reservation id is unknown."""

    default_message = "Error: not found"


class SlotUnavailable(ReservationError):
    """Raised when the car is already reserved for an overlapping period."""

    default_message = "Error: car is already booked for the selected dates"


class NotEligible(ReservationError):
    """Raised when a reservation is not in the state, or the actor lacks the right, for an action."""

    default_message = "Error: reservation not eligible for this action"


class PermissionDenied(NotEligible):
    """Raised when the actor's role does not allow the action."""

    default_message = "Error: not allowed for this user"


class IllegalTransition(NotEligible):
    """Raised when a status change is outside the reservation state machine."""

    default_message = "Error: illegal status transition"


class StorageFailure(ReservationError):
    """Raised when the database fails underneath an operation."""

    default_message = "Error: storage failure"
