from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, EmailStr, Field

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BookingCreate(BaseModel):
    # Presence of the core fields is checked by the booking rules, not here,
    # so a missing field is a 400 rather than a schema error.
    customer_name: str | None = Field(default=None, max_length=255)
    customer_email: EmailStr | None = None
    booking_date: date | None = None
    booking_type: str | None = Field(default=None, max_length=32)  # "Full Day" or FULL_DAY, ...
    booking_slot: str | None = Field(default=None, max_length=32)  # "First Half" or FIRST_HALF, ...
    booking_from_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    booking_to_time: str | None = Field(default=None, pattern=HHMM_PATTERN)


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    customer_email: str
    booking_date: date
    booking_type: str
    booking_slot: str | None
    from_time: time | None
    to_time: time | None
    user_id: int
    created_at: datetime


class BookingCreated(BaseModel):
    message: str = "Booking created successfully"
    booking: BookingOut


class BookingPage(BaseModel):
    bookings: list[BookingOut]
    total: int
    page: int
    total_pages: int
