"""
Reservation lifecycle: creation and every later status change.

Each public function is one transaction. It either commits every row it
touched (reservation, car, archive, return log) or rolls all of them back
and re-raises.
"""
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional, Union
import logging
import uuid

from sqlalchemy.orm import Session

from constants import DATE_FMT, ReservationStatus
from conflicts import has_conflict
from exceptions import (
    InvalidRange, NotEligible, NotFound, PermissionDenied, SlotUnavailable, ValidationError,
)
from pricing import compute_price
from records import Actor, CancellationRecord, ReservationFilter, ReservationRecord
from state_machine import Action, Transition, check_transition, transition_for
import gateway

logger = logging.getLogger(__name__)


@contextmanager
def transaction(db: Session):
    try:
        yield
        gateway.commit(db)
    except Exception:
        db.rollback()
        raise


def parse_date(value: Union[str, date, None], field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError(f"Error: {field} is required")
    try:
        return datetime.strptime(str(value).strip(), DATE_FMT).date()
    except ValueError:
        raise ValidationError(f"Error: {field} must be a date in YYYY-MM-DD format")


def parse_uid(value: Union[str, uuid.UUID, None], field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        raise ValidationError(f"Error: {field} is required")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Error: {field} is not a valid id")


def create_reservation(
    db: Session,
    actor: Actor,
    car_uid: Union[str, uuid.UUID, None],
    purpose: Optional[str],
    date_from: Union[str, date, None],
    date_to: Union[str, date, None],
) -> ReservationRecord:
    car_uid = parse_uid(car_uid, "car id")
    if not purpose or not purpose.strip():
        raise ValidationError("Error: purpose is required")
    start = parse_date(date_from, "start date")
    end = parse_date(date_to, "end date")
    if start > end:
        raise InvalidRange()

    with transaction(db):
        # The car's row lock is held until commit, so no other request can
        # pass the conflict check for this car in between.
        vehicle = gateway.lock_vehicle(db, car_uid)
        if vehicle is None:
            raise NotFound("Error: car not found")

        if has_conflict(db, vehicle.id, start, end):
            logger.warning(
                f"Rejected reservation of car {car_uid} for {start}..{end}: slot unavailable"
            )
            raise SlotUnavailable()

        total_price = compute_price(vehicle.price, vehicle.base_rental_duration, start, end)
        reservation = gateway.insert_reservation(
            db, actor.username, vehicle.id, purpose.strip(), start, end, total_price
        )

    logger.info(
        f"Reservation {reservation.booking_uid} created by {actor.username} "
        f"for car {car_uid} ({start}..{end}), price {total_price}"
    )
    return reservation


def _authorize(actor: Actor, reservation: ReservationRecord, transition: Transition) -> None:
    # Another customer's reservation is reported as missing
    if not actor.is_staff and reservation.username != actor.username:
        raise NotFound("Error: reservation not found")
    if transition.staff_only and not actor.is_staff:
        raise PermissionDenied(f"Error: only staff may {transition.action.value} a reservation")
    if transition.action == Action.CANCEL and reservation.username != actor.username:
        raise PermissionDenied("Error: only the owner may cancel a reservation")


def _apply_status_change(db: Session, reservation: ReservationRecord, transition: Transition) -> None:
    changed = gateway.update_reservation_status(
        db, reservation.id, transition.source, transition.target
    )
    if not changed:
        raise NotEligible(
            f"Error: reservation {reservation.booking_uid} is no longer {transition.source.value}"
        )


def _accept(db: Session, reservation: ReservationRecord, transition: Transition) -> None:
    gateway.lock_vehicle_by_id(db, reservation.car_id)
    if gateway.has_committed_reservation(db, reservation.car_id, exclude_id=reservation.id):
        raise NotEligible("Error: car is already committed to another reservation")
    _apply_status_change(db, reservation, transition)
    gateway.update_vehicle_status(db, reservation.car_id, transition.vehicle_status)


def _cancel(db: Session, reservation: ReservationRecord, transition: Transition) -> None:
    # Serializes with _accept on the same car before the committed check
    gateway.lock_vehicle_by_id(db, reservation.car_id)
    _apply_status_change(db, reservation, transition)
    gateway.archive_cancelled_reservation(db, reservation)
    gateway.delete_reservation(db, reservation.id)
    if not gateway.has_committed_reservation(db, reservation.car_id):
        gateway.update_vehicle_status(db, reservation.car_id, transition.vehicle_status)


def advance(
    db: Session,
    actor: Actor,
    booking_uid: Union[str, uuid.UUID],
    action: Union[str, Action],
) -> ReservationRecord:
    """Move a reservation one step along its lifecycle.

    Raises ValidationError for an unknown action, NotFound for an unknown
    reservation or another customer's, and NotEligible when the actor
    may not act or the reservation is not in the action's source status.
    Returns the reservation as it stands afterwards; a cancelled one is
    returned as it was archived.
    """
    transition = transition_for(action)
    booking_uid = parse_uid(booking_uid, "reservation id")

    with transaction(db):
        reservation = gateway.find_reservation(db, booking_uid)
        if reservation is None:
            raise NotFound("Error: reservation not found")

        _authorize(actor, reservation, transition)
        try:
            check_transition(reservation.status, transition.action)
        except NotEligible:
            logger.warning(
                f"Rejected {transition.action.value} of reservation {booking_uid}: "
                f"status is {reservation.status.value}"
            )
            raise

        if transition.action == Action.ACCEPT:
            _accept(db, reservation, transition)
        elif transition.action == Action.CANCEL:
            _cancel(db, reservation, transition)
        elif transition.action == Action.CONFIRM_RETURN:
            if not gateway.confirm_return_record(db, reservation.id):
                raise NotEligible("Error: return already confirmed or not recorded")
        elif transition.action == Action.MARK_RETURNED:
            _apply_status_change(db, reservation, transition)
            gateway.update_vehicle_status(db, reservation.car_id, transition.vehicle_status)
            gateway.create_return_record(db, reservation.id)
        elif transition.action == Action.CONFIRM:
            _apply_status_change(db, reservation, transition)
            gateway.update_vehicle_status(db, reservation.car_id, transition.vehicle_status)
        else:
            raise NotEligible(f"Error: unsupported action {transition.action.value}")

        if transition.action == Action.CANCEL:
            result = replace(reservation, status=ReservationStatus.CANCELLED)
        else:
            result = gateway.find_reservation_by_id(db, reservation.id)

    logger.info(
        f"Reservation {booking_uid}: {transition.action.value} by {actor.username} "
        f"({transition.source.value} -> {transition.target.value})"
    )
    return result


def get_reservation(
    db: Session, actor: Actor, booking_uid: Union[str, uuid.UUID]
) -> ReservationRecord:
    booking_uid = parse_uid(booking_uid, "reservation id")
    with transaction(db):
        reservation = gateway.find_reservation(db, booking_uid)
    # Another customer's reservation is reported as missing
    if reservation is None or (not actor.is_staff and reservation.username != actor.username):
        raise NotFound("Error: reservation not found")
    return reservation


def list_reservations(
    db: Session, actor: Actor, criteria: Optional[ReservationFilter] = None
) -> List[ReservationRecord]:
    criteria = criteria or ReservationFilter()
    if not actor.is_staff:
        criteria = ReservationFilter(
            username=actor.username, status=criteria.status, car_uid=criteria.car_uid
        )
    with transaction(db):
        return gateway.list_reservations(db, criteria)


def list_cancellations(db: Session, actor: Actor) -> List[CancellationRecord]:
    with transaction(db):
        return gateway.list_cancellations(db, None if actor.is_staff else actor.username)

