"""
Typed records built from database rows at the gateway boundary.

Status strings are converted to their enums here, so a row carrying an
unknown status fails loudly instead of leaking into the core.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import uuid

from constants import ReservationStatus, VehicleStatus


@dataclass(frozen=True)
class Actor:
    username: str
    is_staff: bool = False


@dataclass(frozen=True)
class DateSpan:
    start: date
    end: date


@dataclass(frozen=True)
class VehicleRecord:
    id: int
    car_uid: uuid.UUID
    name: str
    type: str
    color: Optional[str]
    status: VehicleStatus
    price: int
    base_rental_duration: int
    description: Optional[str]

    @classmethod
    def from_row(cls, car) -> "VehicleRecord":
        return cls(
            id=car.id,
            car_uid=car.car_uid,
            name=car.name,
            type=car.type,
            color=car.color,
            status=VehicleStatus(car.status),
            price=car.price,
            base_rental_duration=car.base_rental_duration,
            description=car.description,
        )


@dataclass(frozen=True)
class ReservationRecord:
    id: int
    booking_uid: uuid.UUID
    username: str
    car_id: int
    car_uid: uuid.UUID
    purpose: str
    start_date: date
    end_date: date
    status: ReservationStatus
    total_price: int
    created_at: Optional[datetime]
    return_confirmed: Optional[bool] = None

    @classmethod
    def from_row(cls, booking) -> "ReservationRecord":
        return_log = booking.return_log
        return cls(
            id=booking.id,
            booking_uid=booking.booking_uid,
            username=booking.username,
            car_id=booking.car_id,
            car_uid=booking.car.car_uid,
            purpose=booking.purpose,
            start_date=booking.start_date,
            end_date=booking.end_date,
            status=ReservationStatus(booking.status),
            total_price=booking.total_price,
            created_at=booking.created_at,
            return_confirmed=return_log.confirmed_by_admin if return_log else None,
        )


@dataclass(frozen=True)
class CancellationRecord:
    booking_uid: uuid.UUID
    username: str
    car_uid: uuid.UUID
    purpose: str
    start_date: date
    end_date: date
    status: ReservationStatus
    created_at: datetime
    archived_at: Optional[datetime]

    @classmethod
    def from_row(cls, entry) -> "CancellationRecord":
        return cls(
            booking_uid=entry.booking_uid,
            username=entry.username,
            car_uid=entry.car_uid,
            purpose=entry.purpose,
            start_date=entry.start_date,
            end_date=entry.end_date,
            status=ReservationStatus(entry.status),
            created_at=entry.created_at,
            archived_at=entry.archived_at,
        )


@dataclass(frozen=True)
class ReservationFilter:
    username: Optional[str] = None
    status: Optional[ReservationStatus] = None
    car_uid: Optional[uuid.UUID] = None
