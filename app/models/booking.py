from __future__ import annotations

from datetime import date, time

from sqlalchemy import Date, ForeignKey, Index, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models._mixins import TimestampMixin
from app.models.user import BigIntPK, User


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_date_type_slot", "booking_date", "booking_type", "booking_slot"),
        Index("ix_bookings_date_times", "booking_date", "start_time", "end_time"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)

    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    booking_type: Mapped[str] = mapped_column(String(16), nullable=False)  # FULL_DAY/HALF_DAY/CUSTOM
    booking_slot: Mapped[str | None] = mapped_column(String(16), nullable=True)  # FIRST_HALF/SECOND_HALF

    from_time: Mapped[time | None] = mapped_column("start_time", Time, nullable=True)
    to_time: Mapped[time | None] = mapped_column("end_time", Time, nullable=True)

    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id"), nullable=False, index=True)

    user: Mapped[User] = relationship("User", back_populates="bookings")
