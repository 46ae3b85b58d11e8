from __future__ import annotations

import logging
import math
from datetime import date, time

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import BookingCreate
from app.services.booking_rules import (
    BookingConflictError,
    BookingRequest,
    BookingType,
    BookingValidationError,
    ensure_bookable,
)

logger = logging.getLogger(__name__)

TYPE_LABELS = {
    "Full Day": "FULL_DAY",
    "Half Day": "HALF_DAY",
    "Custom": "CUSTOM",
}

SLOT_LABELS = {
    "First Half": "FIRST_HALF",
    "Second Half": "SECOND_HALF",
}


def normalize_booking_type(value: str | None) -> str | None:
    # Unknown labels pass through and fail the type check later
    if not value:
        return value
    return TYPE_LABELS.get(value, value)


def normalize_booking_slot(value: str | None) -> str | None:
    if not value:
        return value
    return SLOT_LABELS.get(value, value)


def _hhmm(value: time | None) -> str | None:
    return value.strftime("%H:%M") if value is not None else None


def _booked_on(db: Session, booking_date: date) -> list[BookingRequest]:
    rows = db.execute(
        select(Booking.booking_type, Booking.booking_slot, Booking.from_time, Booking.to_time).where(
            Booking.booking_date == booking_date
        )
    ).all()
    return [
        BookingRequest(
            booking_type=booking_type,
            booking_slot=slot,
            from_time=_hhmm(start),
            to_time=_hhmm(end),
        )
        for booking_type, slot, start, end in rows
    ]


def create_booking(db: Session, *, user: User, payload: BookingCreate) -> Booking:
    candidate = BookingRequest(
        booking_type=normalize_booking_type(payload.booking_type),
        booking_date=payload.booking_date,
        booking_slot=normalize_booking_slot(payload.booking_slot),
        from_time=payload.booking_from_time,
        to_time=payload.booking_to_time,
        customer_name=payload.customer_name,
        customer_email=str(payload.customer_email) if payload.customer_email else None,
    )

    # TODO: serialize creation per booking_date (advisory lock or exclusion
    # constraint); two concurrent requests can both pass the scan below.
    try:
        ensure_bookable(candidate, _booked_on(db, payload.booking_date) if payload.booking_date else [])
    except BookingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except BookingConflictError as e:
        logger.info("Booking rejected for %s: %s", candidate.booking_date, e.reason.value)
        raise HTTPException(status_code=409, detail=e.reason.message) from e

    is_half = candidate.booking_type == BookingType.HALF_DAY
    is_custom = candidate.booking_type == BookingType.CUSTOM

    booking = Booking(
        customer_name=candidate.customer_name,
        customer_email=candidate.customer_email,
        booking_date=candidate.booking_date,
        booking_type=candidate.booking_type,
        booking_slot=candidate.booking_slot if is_half else None,
        from_time=time.fromisoformat(candidate.from_time) if is_custom else None,
        to_time=time.fromisoformat(candidate.to_time) if is_custom else None,
        user_id=user.id,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info("Created %s booking %s on %s", booking.booking_type, booking.id, booking.booking_date)
    return booking


def list_bookings(
    db: Session,
    *,
    user: User,
    page: int = 1,
    limit: int = 10,
    booking_date: date | None = None,
) -> dict:
    q = select(Booking).where(Booking.user_id == user.id)
    count_q = select(func.count(Booking.id)).where(Booking.user_id == user.id)
    if booking_date:
        q = q.where(Booking.booking_date == booking_date)
        count_q = count_q.where(Booking.booking_date == booking_date)

    total = db.execute(count_q).scalar_one()
    rows = db.execute(
        q.order_by(Booking.booking_date.desc(), Booking.created_at.desc(), Booking.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).scalars().all()

    return {
        "bookings": rows,
        "total": total,
        "page": page,
        "total_pages": math.ceil(total / limit),
    }
