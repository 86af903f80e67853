"""
Persistence gateway: every query and mutation the reservation core issues.

Functions take the caller's Session and never commit on their own, so the
lifecycle code decides where a transaction ends. SQLAlchemy errors surface
as StorageFailure.
"""
from datetime import date
from functools import wraps
from typing import Iterable, List, Optional, Tuple
import logging
import uuid

from sqlalchemy import func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from constants import COMMITTED_STATUSES, ReservationStatus, VehicleStatus
from exceptions import StorageFailure
from models import Booking, BookingHistory, Car, ReturnLog
from records import (
    CancellationRecord, DateSpan, ReservationFilter, ReservationRecord, VehicleRecord,
)

logger = logging.getLogger(__name__)


def storage_call(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Storage failure in {func.__name__}: {str(e)}")
            raise StorageFailure(f"Error: storage failure in {func.__name__}") from e
    return wrapper


# Cars

@storage_call
def find_vehicle(db: Session, car_uid: uuid.UUID) -> Optional[VehicleRecord]:
    car = db.query(Car).filter(Car.car_uid == car_uid).first()
    return VehicleRecord.from_row(car) if car else None


@storage_call
def lock_vehicle(db: Session, car_uid: uuid.UUID) -> Optional[VehicleRecord]:
    """Load a car and hold its row lock until the transaction ends."""
    car = db.query(Car).filter(Car.car_uid == car_uid).with_for_update().first()
    return VehicleRecord.from_row(car) if car else None


@storage_call
def lock_vehicle_by_id(db: Session, vehicle_id: int) -> Optional[VehicleRecord]:
    car = db.query(Car).filter(Car.id == vehicle_id).with_for_update().first()
    return VehicleRecord.from_row(car) if car else None


@storage_call
def update_vehicle_status(db: Session, vehicle_id: int, status: VehicleStatus) -> None:
    db.execute(
        update(Car)
        .where(Car.id == vehicle_id)
        .values(status=VehicleStatus(status).value)
        .execution_options(synchronize_session=False)
    )


@storage_call
def list_vehicles(
    db: Session,
    offset: int,
    limit: int,
    status: Optional[VehicleStatus] = None,
    color: Optional[str] = None,
    car_type: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[int, List[VehicleRecord]]:
    query = db.query(Car)

    if status is not None:
        query = query.filter(Car.status == status.value)
    if color:
        query = query.filter(Car.color == color)
    if car_type:
        query = query.filter(Car.type == car_type)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Car.name).like(pattern),
            func.lower(Car.description).like(pattern),
        ))

    total_elements = query.count()
    cars = query.order_by(Car.id).offset(offset).limit(limit).all()
    return total_elements, [VehicleRecord.from_row(car) for car in cars]


@storage_call
def insert_vehicle(db: Session, fields: dict) -> VehicleRecord:
    car = Car(car_uid=uuid.uuid4(), status=VehicleStatus.AVAILABLE.value, **fields)
    db.add(car)
    db.flush()
    return VehicleRecord.from_row(car)


@storage_call
def update_vehicle_fields(db: Session, vehicle_id: int, fields: dict) -> VehicleRecord:
    car = db.get(Car, vehicle_id)
    for key, value in fields.items():
        setattr(car, key, value)
    db.flush()
    return VehicleRecord.from_row(car)


@storage_call
def delete_vehicle(db: Session, vehicle_id: int) -> None:
    db.query(Car).filter(Car.id == vehicle_id).delete(synchronize_session=False)


@storage_call
def count_reservations_for_vehicle(db: Session, vehicle_id: int) -> int:
    return db.query(Booking).filter(Booking.car_id == vehicle_id).count()


# Bookings

@storage_call
def find_active_reservations(
    db: Session, vehicle_id: int, statuses: Iterable[ReservationStatus]
) -> List[DateSpan]:
    rows = (
        db.query(Booking.start_date, Booking.end_date)
        .filter(
            Booking.car_id == vehicle_id,
            Booking.status.in_([ReservationStatus(s).value for s in statuses]),
        )
        .all()
    )
    return [DateSpan(row.start_date, row.end_date) for row in rows]


@storage_call
def has_committed_reservation(
    db: Session, vehicle_id: int, exclude_id: Optional[int] = None
) -> bool:
    query = db.query(Booking.id).filter(
        Booking.car_id == vehicle_id,
        Booking.status.in_([s.value for s in COMMITTED_STATUSES]),
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.first() is not None


@storage_call
def insert_reservation(
    db: Session,
    username: str,
    vehicle_id: int,
    purpose: str,
    start: date,
    end: date,
    total_price: int,
) -> ReservationRecord:
    booking = Booking(
        booking_uid=uuid.uuid4(),
        username=username,
        car_id=vehicle_id,
        purpose=purpose,
        start_date=start,
        end_date=end,
        status=ReservationStatus.PENDING.value,
        total_price=total_price,
    )
    db.add(booking)
    db.flush()
    db.refresh(booking)
    return ReservationRecord.from_row(booking)


def _booking_query(db: Session):
    return db.query(Booking).options(
        joinedload(Booking.car), joinedload(Booking.return_log)
    )


@storage_call
def find_reservation(db: Session, booking_uid: uuid.UUID) -> Optional[ReservationRecord]:
    booking = _booking_query(db).filter(Booking.booking_uid == booking_uid).first()
    return ReservationRecord.from_row(booking) if booking else None


@storage_call
def find_reservation_by_id(db: Session, reservation_id: int) -> Optional[ReservationRecord]:
    db.expire_all()
    booking = _booking_query(db).filter(Booking.id == reservation_id).first()
    return ReservationRecord.from_row(booking) if booking else None


@storage_call
def list_reservations(db: Session, criteria: ReservationFilter) -> List[ReservationRecord]:
    query = _booking_query(db)

    if criteria.username is not None:
        query = query.filter(Booking.username == criteria.username)
    if criteria.status is not None:
        query = query.filter(Booking.status == ReservationStatus(criteria.status).value)
    if criteria.car_uid is not None:
        query = query.join(Booking.car).filter(Car.car_uid == criteria.car_uid)

    bookings = query.order_by(Booking.start_date.desc(), Booking.id.desc()).all()
    return [ReservationRecord.from_row(booking) for booking in bookings]


@storage_call
def update_reservation_status(
    db: Session,
    reservation_id: int,
    expected: ReservationStatus,
    new: ReservationStatus,
) -> bool:
    """Conditional update: applies only while the row still has ``expected`` status.

    Returns False when another request changed the status first.
    """
    result = db.execute(
        update(Booking)
        .where(Booking.id == reservation_id, Booking.status == ReservationStatus(expected).value)
        .values(status=ReservationStatus(new).value)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


@storage_call
def delete_reservation(db: Session, reservation_id: int) -> None:
    db.query(Booking).filter(Booking.id == reservation_id).delete(synchronize_session=False)


@storage_call
def archive_cancelled_reservation(db: Session, reservation: ReservationRecord) -> CancellationRecord:
    entry = BookingHistory(
        booking_uid=reservation.booking_uid,
        username=reservation.username,
        car_uid=reservation.car_uid,
        purpose=reservation.purpose,
        start_date=reservation.start_date,
        end_date=reservation.end_date,
        status=ReservationStatus.CANCELLED.value,
        created_at=reservation.created_at,
    )
    db.add(entry)
    db.flush()
    db.refresh(entry)
    return CancellationRecord.from_row(entry)


@storage_call
def list_cancellations(db: Session, username: Optional[str] = None) -> List[CancellationRecord]:
    query = db.query(BookingHistory)
    if username is not None:
        query = query.filter(BookingHistory.username == username)
    entries = query.order_by(BookingHistory.start_date.desc(), BookingHistory.id.desc()).all()
    return [CancellationRecord.from_row(entry) for entry in entries]


# Return logs

@storage_call
def create_return_record(db: Session, reservation_id: int) -> None:
    db.add(ReturnLog(booking_id=reservation_id, confirmed_by_admin=False))
    db.flush()


@storage_call
def confirm_return_record(db: Session, reservation_id: int) -> bool:
    """Conditional update: flips the flag only if it is still unset."""
    result = db.execute(
        update(ReturnLog)
        .where(ReturnLog.booking_id == reservation_id, ReturnLog.confirmed_by_admin == False)
        .values(confirmed_by_admin=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# Transactions

@storage_call
def commit(db: Session) -> None:
    db.commit()

