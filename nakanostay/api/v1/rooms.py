"""Room endpoints."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.api.deps import get_booking_service, get_current_admin, get_db
from nakanostay.api.v1.hotels import get_hotel_or_404
from nakanostay.core.exceptions import ConflictError, NotFoundError
from nakanostay.domain.room_search import (
    RoomFilters,
    RoomWithHotel,
    filter_options,
    filter_rooms,
)
from nakanostay.models.booking import BookingDetail
from nakanostay.models.hotel import Hotel, Room
from nakanostay.models.user import AdminUser
from nakanostay.schemas.hotel import (
    HotelOption,
    HotelResponse,
    OccupiedRangeResponse,
    RoomAvailabilityResponse,
    RoomCreate,
    RoomFilterOptionsResponse,
    RoomResponse,
    RoomWithHotelResponse,
)
from nakanostay.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_room_or_404(db: AsyncSession, room_id: int) -> Room:
    result = await db.execute(select(Room).where(Room.id == room_id))
    room = result.scalar_one_or_none()
    if not room:
        raise NotFoundError("Room", str(room_id))
    return room


async def ensure_room_number_free(
    db: AsyncSession, hotel_id: int, room_number: str, room_id: int | None = None
) -> None:
    query = select(Room.id).where(Room.hotel_id == hotel_id, Room.room_number == room_number)
    if room_id is not None:
        query = query.where(Room.id != room_id)
    if await db.scalar(query) is not None:
        raise ConflictError(f"Hotel {hotel_id} already has a room number {room_number}")


async def load_rooms_with_hotels(db: AsyncSession) -> list[RoomWithHotel]:
    result = await db.execute(
        select(Room, Hotel).join(Hotel, Room.hotel_id == Hotel.id).order_by(Room.id)
    )
    return [RoomWithHotel(room=room, hotel=hotel) for room, hotel in result.all()]


@router.get("", response_model=list[RoomResponse])
async def list_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Room]:
    """List all rooms."""
    result = await db.execute(select(Room).order_by(Room.id))
    return list(result.scalars().all())


@router.get("/search", response_model=list[RoomWithHotelResponse])
async def search_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
    stars: int | None = Query(default=None, ge=1, le=5),
    city: str | None = None,
    hotel_id: int | None = Query(default=None, alias="hotelId"),
    room_type: str | None = Query(default=None, alias="roomType"),
    only_available: bool = Query(default=False, alias="onlyAvailable"),
    q: str | None = Query(default=None, max_length=100),
) -> list[RoomWithHotelResponse]:
    """Rooms joined with their hotel, narrowed by catalogue filters."""
    items = await load_rooms_with_hotels(db)
    filters = RoomFilters(
        stars=stars,
        city=city,
        hotel_id=hotel_id,
        room_type=room_type,
        only_available=only_available,
        q=q,
    )
    return [
        RoomWithHotelResponse(
            room=RoomResponse.model_validate(item.room),
            hotel=HotelResponse.model_validate(item.hotel),
        )
        for item in filter_rooms(items, filters)
    ]


@router.get("/filters", response_model=RoomFilterOptionsResponse)
async def get_room_filter_options(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomFilterOptionsResponse:
    """Cities, star ratings, hotels and room types present in the catalogue."""
    options = filter_options(await load_rooms_with_hotels(db))
    return RoomFilterOptionsResponse(
        cities=options.cities,
        stars=options.stars,
        hotels=[HotelOption.model_validate(hotel) for hotel in options.hotels],
        room_types=options.room_types,
    )


@router.get("/hotel/{hotel_id}", response_model=list[RoomResponse])
async def list_rooms_by_hotel(
    hotel_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Room]:
    """List the rooms of one hotel."""
    await get_hotel_or_404(db, hotel_id)
    result = await db.execute(select(Room).where(Room.hotel_id == hotel_id).order_by(Room.id))
    return list(result.scalars().all())


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Get a room by ID."""
    return await get_room_or_404(db, room_id)


@router.get("/{room_id}/availability", response_model=RoomAvailabilityResponse)
async def get_room_availability(
    room_id: int,
    service: Annotated[BookingService, Depends(get_booking_service)],
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
) -> RoomAvailabilityResponse:
    """Free nights and occupied ranges of a room in [startDate, endDate)."""
    availability = await service.room_availability(room_id, start_date, end_date)
    return RoomAvailabilityResponse(
        room_id=room_id,
        available_dates=availability.available_dates,
        occupied_ranges=[
            OccupiedRangeResponse(start=r.start, end=r.end)
            for r in availability.occupied_ranges
        ],
    )


# ============ ADMIN ============


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: RoomCreate,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Create a room (admin only)."""
    await get_hotel_or_404(db, room_data.hotel_id)
    await ensure_room_number_free(db, room_data.hotel_id, room_data.room_number)

    room = Room(**room_data.model_dump())
    db.add(room)
    await db.flush()
    logger.info(f"Room {room.id} ({room.room_number}) created in hotel {room.hotel_id}")
    return room


@router.put("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: int,
    room_data: RoomCreate,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Replace a room's details (admin only).

    Price changes apply to new bookings only; existing bookings keep the
    price captured when they were made.
    """
    room = await get_room_or_404(db, room_id)
    await get_hotel_or_404(db, room_data.hotel_id)
    await ensure_room_number_free(db, room_data.hotel_id, room_data.room_number, room_id)

    for field, value in room_data.model_dump().items():
        setattr(room, field, value)
    await db.flush()
    return room


async def _set_availability(db: AsyncSession, room_id: int, available: bool) -> Room:
    room = await get_room_or_404(db, room_id)
    room.is_available = available
    await db.flush()
    logger.info(f"Room {room_id} marked {'available' if available else 'unavailable'}")
    return room


@router.put("/{room_id}/available", response_model=RoomResponse)
async def make_room_available(
    room_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Switch a room on for booking (admin only)."""
    return await _set_availability(db, room_id, True)


@router.put("/{room_id}/unavailable", response_model=RoomResponse)
async def make_room_unavailable(
    room_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Switch a room off for every date (admin only)."""
    return await _set_availability(db, room_id, False)


@router.delete("/delete/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a room that no booking refers to (admin only)."""
    room = await get_room_or_404(db, room_id)

    booking_count = await db.scalar(
        select(func.count()).select_from(BookingDetail).where(BookingDetail.room_id == room_id)
    )
    if booking_count:
        raise ConflictError(
            "Room is referenced by existing bookings; mark it unavailable instead"
        )

    await db.delete(room)
    logger.info(f"Room {room_id} deleted by admin {admin.id}")
