"""Hotel and room Pydantic schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class HotelBase(BaseModel):
    """Base hotel schema."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    city: str | None = Field(None, max_length=100)
    stars: int | None = Field(None, ge=1, le=5)
    email: EmailStr


class HotelCreate(HotelBase):
    """Schema for creating or replacing a hotel."""


class HotelResponse(HotelBase):
    """Schema for hotel response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class RoomBase(BaseModel):
    """Base room schema."""

    hotel_id: int
    room_number: str = Field(..., min_length=1, max_length=20)
    room_type: str | None = Field(None, max_length=50)
    price_per_night: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    is_available: bool = True


class RoomCreate(RoomBase):
    """Schema for creating or replacing a room."""


class RoomResponse(RoomBase):
    """Schema for room response."""

    model_config = ConfigDict(from_attributes=True)

    id: int


class RoomWithHotelResponse(BaseModel):
    """Room joined with its hotel, for catalogue listings."""

    room: RoomResponse
    hotel: HotelResponse


class OccupiedRangeResponse(BaseModel):
    """Half-open occupied range [start, end)."""

    start: date
    end: date


class RoomAvailabilityResponse(BaseModel):
    """Schema for room availability inside a date window."""

    room_id: int
    available_dates: list[date]
    occupied_ranges: list[OccupiedRangeResponse]


class HotelOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class RoomFilterOptionsResponse(BaseModel):
    """Values offered by the room catalogue filters."""

    cities: list[str]
    stars: list[int]
    hotels: list[HotelOption]
    room_types: list[str]
