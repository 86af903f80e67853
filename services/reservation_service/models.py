from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer,
    String, Text, Uuid, func,
)
from sqlalchemy.orm import relationship
import uuid

from constants import CAR_TYPES, ReservationStatus, VehicleStatus, check_values
from database import Base


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, index=True)
    car_uid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    type = Column(String(20), nullable=False)
    color = Column(String(40))
    status = Column(String(20), nullable=False, default=VehicleStatus.AVAILABLE.value)
    price = Column(Integer, nullable=False)
    base_rental_duration = Column(Integer, nullable=False, default=1)
    description = Column(Text)

    bookings = relationship("Booking", back_populates="car")

    __table_args__ = (
        CheckConstraint(
            f"status IN ({check_values(VehicleStatus)})",
            name="car_status_check"
        ),
        CheckConstraint(
            "type IN (" + ", ".join(f"'{t}'" for t in CAR_TYPES) + ")",
            name="car_type_check"
        ),
        CheckConstraint("price >= 0", name="car_price_check"),
        CheckConstraint("base_rental_duration >= 1", name="car_base_duration_check"),
    )


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_uid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)
    username = Column(String(80), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)
    purpose = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)
    total_price = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    car = relationship("Car", back_populates="bookings")
    return_log = relationship("ReturnLog", back_populates="booking", uselist=False)

    __table_args__ = (
        CheckConstraint(
            f"status IN ({check_values(ReservationStatus)})",
            name="booking_status_check"
        ),
        CheckConstraint("start_date <= end_date", name="booking_dates_check"),
    )


class BookingHistory(Base):
    __tablename__ = "booking_history"

    id = Column(Integer, primary_key=True, index=True)
    booking_uid = Column(Uuid(as_uuid=True), nullable=False, unique=True)
    username = Column(String(80), nullable=False, index=True)
    car_uid = Column(Uuid(as_uuid=True), nullable=False)
    purpose = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.CANCELLED.value)
    created_at = Column(DateTime(timezone=True), nullable=False)
    archived_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            f"status = '{ReservationStatus.CANCELLED.value}'",
            name="booking_history_status_check"
        ),
    )


class ReturnLog(Base):
    __tablename__ = "return_logs"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    confirmed_by_admin = Column(Boolean, nullable=False, default=False)
    returned_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    booking = relationship("Booking", back_populates="return_log")
