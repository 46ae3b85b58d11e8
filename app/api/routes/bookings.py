from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingCreated, BookingOut, BookingPage
from app.services.booking_service import create_booking, list_bookings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create(payload: BookingCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        booking = create_booking(db, user=user, payload=payload)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Create booking error")
        raise HTTPException(status_code=500, detail="Server error during booking creation") from e
    return BookingCreated(booking=BookingOut.model_validate(booking))


@router.get("", response_model=BookingPage)
def index(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    booking_date: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        result = list_bookings(db, user=user, page=page, limit=limit, booking_date=booking_date)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error fetching bookings")
        raise HTTPException(status_code=500, detail="Error fetching bookings data") from e
    return BookingPage(
        bookings=[BookingOut.model_validate(b) for b in result["bookings"]],
        total=result["total"],
        page=result["page"],
        total_pages=result["total_pages"],
    )
