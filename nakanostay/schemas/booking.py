"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from nakanostay.domain.booking_request import BookingCandidate, BookingLine
from nakanostay.domain.booking_state import BookingStatus


class BookingDetailCreate(BaseModel):
    """One requested room."""

    room_id: int
    guests: int = 1


class BookingCreate(BaseModel):
    """Schema for creating a booking.

    Business rules (identity checksum, dates, guest counts) are enforced by the
    booking service so every violation can be reported together; only shapes
    and types are checked here. A client-supplied ``status`` is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    guest_name: str = Field(..., max_length=200)
    guest_dni: str = Field(..., max_length=20)
    guest_email: str = Field(..., max_length=255)
    guest_phone: str | None = Field(None, max_length=20)
    check_in: date
    check_out: date
    details: list[BookingDetailCreate] = Field(..., max_length=20)

    def to_candidate(self) -> BookingCandidate:
        return BookingCandidate(
            guest_name=self.guest_name,
            guest_dni=self.guest_dni.strip(),
            guest_email=self.guest_email,
            guest_phone=self.guest_phone or None,
            check_in=self.check_in,
            check_out=self.check_out,
            details=tuple(BookingLine(d.room_id, d.guests) for d in self.details),
        )


class BookingDetailResponse(BaseModel):
    """Schema for a booking detail line."""

    model_config = ConfigDict(from_attributes=True)

    room_id: int
    guests: int
    price_at_booking: Decimal


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_code: str

    # Guest
    guest_name: str
    guest_dni: str
    guest_email: str
    guest_phone: str | None

    # Dates
    booking_date: datetime
    check_in: date
    check_out: date
    nights: int

    # Status
    status: BookingStatus
    cancelled_by: str | None = None

    # Pricing
    total: Decimal
    details: list[BookingDetailResponse]

    # Timestamps
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None
