from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from constants import ACTIVE_STATUSES, ReservationStatus
from records import DateSpan
import gateway


def overlaps(first: DateSpan, second: DateSpan) -> bool:
    # Inclusive spans: sharing a single day counts as an overlap
    return not (first.end < second.start or first.start > second.end)


def has_conflict(
    db: Session,
    vehicle_id: int,
    start: date,
    end: date,
    active_statuses: Iterable[ReservationStatus] = ACTIVE_STATUSES,
) -> bool:
    requested = DateSpan(start, end)
    existing = gateway.find_active_reservations(db, vehicle_id, active_statuses)
    return any(overlaps(span, requested) for span in existing)
