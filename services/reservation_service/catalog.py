"""
Car catalog: the customer-facing listing and search, and staff car management.

A car's status belongs to the reservation lifecycle and cannot be edited here.
"""
from typing import List, Optional, Tuple, Union
import logging
import uuid

from sqlalchemy.orm import Session

from constants import CAR_TYPES, VehicleStatus
from exceptions import NotEligible, NotFound, PermissionDenied, ValidationError
from lifecycle import parse_uid, transaction
from records import Actor, VehicleRecord
import gateway

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "type", "color", "price", "base_rental_duration", "description")


def _require_staff(actor: Actor) -> None:
    if not actor.is_staff:
        raise PermissionDenied("Error: only staff may manage cars")


def _validate_fields(fields: dict) -> dict:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Error: cannot edit {', '.join(sorted(unknown))}")
    if "name" in fields and not (fields["name"] or "").strip():
        raise ValidationError("Error: name is required")
    if "type" in fields and fields["type"] not in CAR_TYPES:
        raise ValidationError(f"Error: type must be one of {', '.join(CAR_TYPES)}")
    if "price" in fields and (fields["price"] is None or fields["price"] < 0):
        raise ValidationError("Error: price must not be negative")
    if "base_rental_duration" in fields and (
        fields["base_rental_duration"] is None or fields["base_rental_duration"] < 1
    ):
        raise ValidationError("Error: base rental duration must be at least one day")
    return fields


def list_vehicles(
    db: Session,
    page: int = 1,
    size: int = 10,
    show_all: bool = False,
    color: Optional[str] = None,
    car_type: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[int, List[VehicleRecord]]:
    status = None if show_all else VehicleStatus.AVAILABLE
    with transaction(db):
        return gateway.list_vehicles(
            db,
            offset=(page - 1) * size,
            limit=size,
            status=status,
            color=color,
            car_type=car_type,
            search=search,
        )


def get_vehicle(db: Session, car_uid: Union[str, uuid.UUID]) -> VehicleRecord:
    car_uid = parse_uid(car_uid, "car id")
    with transaction(db):
        vehicle = gateway.find_vehicle(db, car_uid)
    if vehicle is None:
        raise NotFound("Error: car not found")
    return vehicle


def create_vehicle(db: Session, actor: Actor, fields: dict) -> VehicleRecord:
    _require_staff(actor)
    for required in ("name", "type", "price"):
        if fields.get(required) is None:
            raise ValidationError(f"Error: {required} is required")
    fields = dict(_validate_fields(fields))
    fields.setdefault("base_rental_duration", 1)

    with transaction(db):
        vehicle = gateway.insert_vehicle(db, fields)

    logger.info(f"Car {vehicle.car_uid} ({vehicle.name}) added by {actor.username}")
    return vehicle


def update_vehicle(
    db: Session, actor: Actor, car_uid: Union[str, uuid.UUID], fields: dict
) -> VehicleRecord:
    _require_staff(actor)
    car_uid = parse_uid(car_uid, "car id")
    fields = _validate_fields(fields)

    with transaction(db):
        vehicle = gateway.lock_vehicle(db, car_uid)
        if vehicle is None:
            raise NotFound("Error: car not found")
        if fields:
            vehicle = gateway.update_vehicle_fields(db, vehicle.id, fields)

    logger.info(f"Car {car_uid} updated by {actor.username}: {', '.join(sorted(fields))}")
    return vehicle


def delete_vehicle(db: Session, actor: Actor, car_uid: Union[str, uuid.UUID]) -> None:
    _require_staff(actor)
    car_uid = parse_uid(car_uid, "car id")

    with transaction(db):
        vehicle = gateway.lock_vehicle(db, car_uid)
        if vehicle is None:
            raise NotFound("Error: car not found")
        if gateway.count_reservations_for_vehicle(db, vehicle.id):
            raise NotEligible("Error: car is referenced by reservations and cannot be deleted")
        gateway.delete_vehicle(db, vehicle.id)

    logger.info(f"Car {car_uid} deleted by {actor.username}")
