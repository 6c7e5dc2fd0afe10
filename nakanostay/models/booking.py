"""Booking-related database models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from nakanostay.database import Base

if TYPE_CHECKING:
    from nakanostay.models.hotel import Room


class Booking(Base):
    """Booking model."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # NKS-XXXXXX

    # Guest (no account: code + dni is the credential)
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guest_dni: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_phone: Mapped[str | None] = mapped_column(String(20))

    # Dates; check_out is exclusive
    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_in: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PENDING", index=True
    )  # PENDING, CONFIRMED, CANCELLED, COMPLETED
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # guest, admin

    # Sum of price_at_booking * nights
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    details: Mapped[list["BookingDetail"]] = relationship(
        "BookingDetail",
        back_populates="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BookingDetail.id",
    )

    @property
    def nights(self) -> int:
        """Calculate number of nights."""
        return (self.check_out - self.check_in).days

    @property
    def total_guests(self) -> int:
        return sum(detail.guests for detail in self.details)


class BookingDetail(Base):
    """One room of a booking, with the nightly price captured at booking time."""

    __tablename__ = "booking_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id"), nullable=False, index=True
    )
    guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Decoupled from Room.price_per_night: later price changes never touch history
    price_at_booking: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="details")
    room: Mapped["Room"] = relationship("Room", back_populates="booking_details")
