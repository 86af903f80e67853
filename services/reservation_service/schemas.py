from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Literal, Optional

ReservationStatusLiteral = Literal["pending", "accepted", "confirmed", "returned", "cancelled"]
VehicleStatusLiteral = Literal["available", "booked", "not-available"]


class CarCreate(BaseModel):
    name: str
    type: str
    color: Optional[str] = None
    price: int = Field(ge=0)
    base_rental_duration: int = Field(1, ge=1, validation_alias="baseRentalDuration")
    description: Optional[str] = None

    class Config:
        populate_by_name = True


class CarUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    price: Optional[int] = Field(None, ge=0)
    base_rental_duration: Optional[int] = Field(None, ge=1, validation_alias="baseRentalDuration")
    description: Optional[str] = None

    class Config:
        populate_by_name = True


class CarResponse(BaseModel):
    car_uid: UUID = Field(serialization_alias="carUid")
    name: str
    type: str
    color: Optional[str] = None
    status: VehicleStatusLiteral
    price: int
    base_rental_duration: int = Field(serialization_alias="baseRentalDuration")
    description: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class PaginationResponse(BaseModel):
    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total_elements: int = Field(serialization_alias="totalElements")
    items: list[CarResponse]

    class Config:
        populate_by_name = True


class CreateReservationRequest(BaseModel):
    car_uid: str = Field(validation_alias="carUid")
    purpose: str
    date_from: str = Field(validation_alias="dateFrom")
    date_to: str = Field(validation_alias="dateTo")

    class Config:
        populate_by_name = True


class ReservationResponse(BaseModel):
    reservation_uid: UUID = Field(serialization_alias="reservationUid")
    username: str
    car_uid: UUID = Field(serialization_alias="carUid")
    purpose: str
    date_from: str = Field(serialization_alias="dateFrom")
    date_to: str = Field(serialization_alias="dateTo")
    status: ReservationStatusLiteral
    total_price: int = Field(serialization_alias="totalPrice")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    return_confirmed: Optional[bool] = Field(None, serialization_alias="returnConfirmed")

    class Config:
        populate_by_name = True


class CancellationResponse(BaseModel):
    reservation_uid: UUID = Field(serialization_alias="reservationUid")
    username: str
    car_uid: UUID = Field(serialization_alias="carUid")
    purpose: str
    date_from: str = Field(serialization_alias="dateFrom")
    date_to: str = Field(serialization_alias="dateTo")
    status: Literal["cancelled"]
    created_at: datetime = Field(serialization_alias="createdAt")
    archived_at: Optional[datetime] = Field(None, serialization_alias="archivedAt")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    message: str
