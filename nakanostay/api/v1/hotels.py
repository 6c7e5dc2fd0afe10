"""Hotel endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.api.deps import get_current_admin, get_db
from nakanostay.core.exceptions import ConflictError, NotFoundError
from nakanostay.models.hotel import Hotel, Room
from nakanostay.models.user import AdminUser
from nakanostay.schemas.hotel import HotelCreate, HotelResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_hotel_or_404(db: AsyncSession, hotel_id: int) -> Hotel:
    result = await db.execute(select(Hotel).where(Hotel.id == hotel_id))
    hotel = result.scalar_one_or_none()
    if not hotel:
        raise NotFoundError("Hotel", str(hotel_id))
    return hotel


@router.get("", response_model=list[HotelResponse])
async def list_hotels(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Hotel]:
    """List all hotels."""
    result = await db.execute(select(Hotel).order_by(Hotel.id))
    return list(result.scalars().all())


@router.get("/{hotel_id}", response_model=HotelResponse)
async def get_hotel(
    hotel_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Hotel:
    """Get a hotel by ID."""
    return await get_hotel_or_404(db, hotel_id)


# ============ ADMIN ============


@router.post("", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
async def create_hotel(
    hotel_data: HotelCreate,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Hotel:
    """Create a hotel (admin only)."""
    hotel = Hotel(**hotel_data.model_dump())
    db.add(hotel)
    await db.flush()
    logger.info(f"Hotel {hotel.id} '{hotel.name}' created by admin {admin.id}")
    return hotel


@router.put("/{hotel_id}", response_model=HotelResponse)
async def update_hotel(
    hotel_id: int,
    hotel_data: HotelCreate,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Hotel:
    """Replace a hotel's details (admin only)."""
    hotel = await get_hotel_or_404(db, hotel_id)
    for field, value in hotel_data.model_dump().items():
        setattr(hotel, field, value)
    await db.flush()
    return hotel


@router.delete("/delete/{hotel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_hotel(
    hotel_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a hotel without rooms (admin only)."""
    hotel = await get_hotel_or_404(db, hotel_id)

    room_count = await db.scalar(
        select(func.count()).select_from(Room).where(Room.hotel_id == hotel_id)
    )
    if room_count:
        raise ConflictError(f"Hotel still has {room_count} room(s); delete them first")

    await db.delete(hotel)
    logger.info(f"Hotel {hotel_id} deleted by admin {admin.id}")
