"""Booking conflict rules.

Pure functions deciding whether a candidate booking collides with the
bookings already stored for the same date. Nothing here touches the
database; callers pass the date's bookings in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional, Protocol


class BookingType(str, Enum):
    FULL_DAY = "FULL_DAY"
    HALF_DAY = "HALF_DAY"
    CUSTOM = "CUSTOM"


class BookingSlot(str, Enum):
    FIRST_HALF = "FIRST_HALF"
    SECOND_HALF = "SECOND_HALF"


_TYPE_TOKENS = {t.value for t in BookingType}
_SLOT_TOKENS = {s.value for s in BookingSlot}


class ConflictReason(str, Enum):
    FULL_DAY_EXISTS = "full_day_exists"
    DATE_HAS_BOOKINGS = "date_has_bookings"
    SLOT_BOOKED = "slot_booked"
    SLOT_BOOKED_BY_CUSTOM = "slot_booked_by_custom"
    CUSTOM_IN_SLOT = "custom_in_slot"
    TIME_OVERLAP = "time_overlap"
    CUSTOM_BOOKINGS_EXIST = "custom_bookings_exist"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    ConflictReason.FULL_DAY_EXISTS: "A full-day booking already exists for this date",
    ConflictReason.DATE_HAS_BOOKINGS: "Cannot create full-day booking: other bookings exist for this date",
    ConflictReason.SLOT_BOOKED: "Slot already booked for this date",
    ConflictReason.SLOT_BOOKED_BY_CUSTOM: "Cannot create custom booking: slot already booked by custom booking start time",
    ConflictReason.CUSTOM_IN_SLOT: "Cannot create half-day booking: a custom booking exists in this slot",
    ConflictReason.TIME_OVERLAP: "Time overlap with an existing custom booking",
    ConflictReason.CUSTOM_BOOKINGS_EXIST: "Cannot create full-day booking: custom bookings exist for this date",
}


class BookingValidationError(ValueError):
    """Candidate is missing a required field or carries a malformed one."""


class BookingConflictError(Exception):
    def __init__(self, reason: ConflictReason):
        super().__init__(reason.message)
        self.reason = reason


class BookingLike(Protocol):
    booking_type: Optional[str]
    booking_slot: Optional[str]
    from_time: Optional[str]
    to_time: Optional[str]


@dataclass(frozen=True)
class BookingRequest:
    booking_type: Optional[str]
    booking_date: Optional[date] = None
    booking_slot: Optional[str] = None
    from_time: Optional[str] = None
    to_time: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


@dataclass(frozen=True)
class BookingDecision:
    reason: Optional[ConflictReason] = None

    @property
    def accepted(self) -> bool:
        return self.reason is None


ACCEPTED = BookingDecision()


# Time helpers

def to_minutes(value: str) -> int:
    # "HH:MM" or "HH:MM:SS"; seconds are ignored
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def half_of_day(value: str) -> BookingSlot:
    hours = int(value.split(":", 1)[0])
    return BookingSlot.FIRST_HALF if hours < 12 else BookingSlot.SECOND_HALF


def times_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Half-open interval overlap: touching boundaries do not overlap."""
    return to_minutes(start1) < to_minutes(end2) and to_minutes(start2) < to_minutes(end1)


# Rules

def check_preconditions(candidate: BookingRequest) -> None:
    """Reject candidates that cannot be evaluated at all.

    Labels must already be normalized to the canonical tokens.
    """
    if (
        not candidate.customer_name
        or not candidate.customer_email
        or not candidate.booking_date
        or not candidate.booking_type
    ):
        raise BookingValidationError("Customer name, email, booking date, and type are required")

    if candidate.booking_type not in _TYPE_TOKENS:
        raise BookingValidationError(f"Unsupported booking type: {candidate.booking_type}")

    if candidate.booking_type == BookingType.HALF_DAY:
        if not candidate.booking_slot:
            raise BookingValidationError("Booking slot is required for half-day bookings")
        if candidate.booking_slot not in _SLOT_TOKENS:
            raise BookingValidationError(f"Unsupported booking slot: {candidate.booking_slot}")

    if candidate.booking_type == BookingType.CUSTOM:
        if not candidate.from_time or not candidate.to_time:
            raise BookingValidationError("Booking from and to times are required for custom bookings")
        # zero-padded "HH:MM" compares correctly as text
        if candidate.from_time >= candidate.to_time:
            raise BookingValidationError("Booking from time must be before booking to time")


def _conflict_with(candidate: BookingLike, existing: BookingLike) -> Optional[ConflictReason]:
    new_type = candidate.booking_type

    if existing.booking_type == BookingType.FULL_DAY:
        return ConflictReason.FULL_DAY_EXISTS
    if new_type == BookingType.FULL_DAY:
        return ConflictReason.DATE_HAS_BOOKINGS

    if existing.booking_type == BookingType.HALF_DAY:
        if new_type == BookingType.HALF_DAY and candidate.booking_slot == existing.booking_slot:
            return ConflictReason.SLOT_BOOKED
        if new_type == BookingType.CUSTOM and half_of_day(candidate.from_time) == existing.booking_slot:
            return ConflictReason.SLOT_BOOKED_BY_CUSTOM

    elif existing.booking_type == BookingType.CUSTOM:
        if new_type == BookingType.HALF_DAY and half_of_day(existing.from_time) == candidate.booking_slot:
            return ConflictReason.CUSTOM_IN_SLOT
        if new_type == BookingType.CUSTOM and times_overlap(
            existing.from_time, existing.to_time, candidate.from_time, candidate.to_time
        ):
            return ConflictReason.TIME_OVERLAP
        if new_type == BookingType.FULL_DAY:
            return ConflictReason.CUSTOM_BOOKINGS_EXIST

    return None


def evaluate_booking(candidate: BookingLike, existing: Iterable[BookingLike]) -> BookingDecision:
    """Scan the date's bookings; the first conflict found wins."""
    for booked in existing:
        reason = _conflict_with(candidate, booked)
        if reason is not None:
            return BookingDecision(reason=reason)
    return ACCEPTED


def ensure_bookable(candidate: BookingRequest, existing: Iterable[BookingLike]) -> None:
    check_preconditions(candidate)
    decision = evaluate_booking(candidate, existing)
    if not decision.accepted:
        raise BookingConflictError(decision.reason)
