from fastapi import FastAPI, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import uvicorn
import uuid

from config import LOG_LEVEL, PORT
from constants import DATE_FMT, ReservationStatus
from database import engine, get_db, Base
from exceptions import (
    NotEligible, NotFound, PermissionDenied, ReservationError, SlotUnavailable,
    StorageFailure, ValidationError,
)
from records import Actor, CancellationRecord, ReservationFilter, ReservationRecord, VehicleRecord
from schemas import (
    CancellationResponse, CarCreate, CarResponse, CarUpdate, CreateReservationRequest,
    ErrorResponse, PaginationResponse, ReservationResponse,
)
from state_machine import Action
import catalog
import lifecycle

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Reservation Service")

STAFF_ROLE = "admin"

# Most specific first
ERROR_STATUS = (
    (ValidationError, 400),
    (PermissionDenied, 403),
    (NotFound, 404),
    (SlotUnavailable, 409),
    (NotEligible, 409),
    (StorageFailure, 503),
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)), 500
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=exc.message).model_dump()
    )


def get_actor(
    x_user_name: str = Header(..., alias="X-User-Name"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role")
) -> Actor:
    return Actor(username=x_user_name, is_staff=(x_user_role or "").lower() == STAFF_ROLE)


def car_response(vehicle: VehicleRecord) -> CarResponse:
    return CarResponse(
        car_uid=vehicle.car_uid,
        name=vehicle.name,
        type=vehicle.type,
        color=vehicle.color,
        status=vehicle.status.value,
        price=vehicle.price,
        base_rental_duration=vehicle.base_rental_duration,
        description=vehicle.description
    )


def reservation_response(reservation: ReservationRecord) -> ReservationResponse:
    return ReservationResponse(
        reservation_uid=reservation.booking_uid,
        username=reservation.username,
        car_uid=reservation.car_uid,
        purpose=reservation.purpose,
        date_from=reservation.start_date.strftime(DATE_FMT),
        date_to=reservation.end_date.strftime(DATE_FMT),
        status=reservation.status.value,
        total_price=reservation.total_price,
        created_at=reservation.created_at,
        return_confirmed=reservation.return_confirmed
    )


def cancellation_response(entry: CancellationRecord) -> CancellationResponse:
    return CancellationResponse(
        reservation_uid=entry.booking_uid,
        username=entry.username,
        car_uid=entry.car_uid,
        purpose=entry.purpose,
        date_from=entry.start_date.strftime(DATE_FMT),
        date_to=entry.end_date.strftime(DATE_FMT),
        status=entry.status.value,
        created_at=entry.created_at,
        archived_at=entry.archived_at
    )


@app.get("/manage/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/v1/cars", response_model=PaginationResponse)
def get_cars(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    show_all: bool = Query(False, alias="showAll"),
    color: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    total_elements, vehicles = catalog.list_vehicles(
        db, page=page, size=size, show_all=show_all, color=color, car_type=type, search=search
    )
    items = [car_response(vehicle) for vehicle in vehicles]

    return PaginationResponse(
        page=page,
        page_size=len(items),
        total_elements=total_elements,
        items=items
    )


@app.get("/api/v1/cars/{car_uid}", response_model=CarResponse)
def get_car(car_uid: uuid.UUID, db: Session = Depends(get_db)):
    return car_response(catalog.get_vehicle(db, car_uid))


@app.post("/api/v1/cars", response_model=CarResponse, status_code=201)
def create_car(
    car: CarCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return car_response(catalog.create_vehicle(db, actor, car.model_dump()))


@app.patch("/api/v1/cars/{car_uid}", response_model=CarResponse)
def update_car(
    car_uid: uuid.UUID,
    car: CarUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return car_response(catalog.update_vehicle(db, actor, car_uid, car.model_dump(exclude_unset=True)))


@app.delete("/api/v1/cars/{car_uid}", status_code=204)
def delete_car(
    car_uid: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    catalog.delete_vehicle(db, actor, car_uid)
    return None


@app.post("/api/v1/reservations", response_model=ReservationResponse, status_code=201)
def create_reservation(
    request: CreateReservationRequest,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    reservation = lifecycle.create_reservation(
        db, actor, request.car_uid, request.purpose, request.date_from, request.date_to
    )
    return reservation_response(reservation)


@app.get("/api/v1/reservations", response_model=List[ReservationResponse])
def get_reservations(
    status: Optional[ReservationStatus] = Query(None),
    car_uid: Optional[uuid.UUID] = Query(None, alias="carUid"),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    criteria = ReservationFilter(status=status, car_uid=car_uid)
    return [reservation_response(r) for r in lifecycle.list_reservations(db, actor, criteria)]


@app.get("/api/v1/reservations/history", response_model=List[CancellationResponse])
def get_cancellations(
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return [cancellation_response(entry) for entry in lifecycle.list_cancellations(db, actor)]


@app.get("/api/v1/reservations/{reservation_uid}", response_model=ReservationResponse)
def get_reservation(
    reservation_uid: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return reservation_response(lifecycle.get_reservation(db, actor, reservation_uid))


@app.post("/api/v1/reservations/{reservation_uid}/{action}", response_model=ReservationResponse)
def advance_reservation(
    reservation_uid: uuid.UUID,
    action: Action,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db)
):
    return reservation_response(lifecycle.advance(db, actor, reservation_uid, action))


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
