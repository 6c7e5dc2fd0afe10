"""Pydantic schemas for API validation."""

from nakanostay.schemas.booking import (
    BookingCreate,
    BookingDetailCreate,
    BookingDetailResponse,
    BookingResponse,
)
from nakanostay.schemas.hotel import (
    HotelCreate,
    HotelOption,
    HotelResponse,
    OccupiedRangeResponse,
    RoomAvailabilityResponse,
    RoomCreate,
    RoomFilterOptionsResponse,
    RoomResponse,
    RoomWithHotelResponse,
)
from nakanostay.schemas.user import AdminLogin, RefreshTokenRequest, TokenResponse

__all__ = [
    # Admin
    "AdminLogin",
    "RefreshTokenRequest",
    "TokenResponse",
    # Hotel
    "HotelCreate",
    "HotelResponse",
    "HotelOption",
    # Room
    "RoomCreate",
    "RoomResponse",
    "RoomWithHotelResponse",
    "RoomFilterOptionsResponse",
    "RoomAvailabilityResponse",
    "OccupiedRangeResponse",
    # Booking
    "BookingCreate",
    "BookingDetailCreate",
    "BookingResponse",
    "BookingDetailResponse",
]
