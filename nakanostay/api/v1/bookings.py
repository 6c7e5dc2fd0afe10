"""Booking endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.api.deps import (
    get_booking_service,
    get_current_admin,
    get_db,
    get_optional_admin,
)
from nakanostay.core.exceptions import NotFoundError
from nakanostay.core.middleware import booking_lookup_limiter
from nakanostay.domain.booking_search import filter_bookings
from nakanostay.domain.booking_state import Actor, BookingStatus
from nakanostay.models.booking import Booking
from nakanostay.models.user import AdminUser
from nakanostay.schemas.booking import BookingCreate, BookingResponse
from nakanostay.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter()

DniQuery = Annotated[str, Query(..., alias="dni", min_length=1, max_length=20)]


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> Booking:
    """Create a new booking in PENDING."""
    return await service.submit(booking_data.to_candidate())


@router.get(
    "/code/{code}",
    response_model=BookingResponse,
    dependencies=[Depends(booking_lookup_limiter)],
)
async def get_booking_by_code(
    code: str,
    dni: DniQuery,
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> Booking:
    """Guest lookup by booking code and identity number."""
    return await service.find_by_code_and_identity(code, dni)


@router.put(
    "/code/{code}/cancel",
    response_model=BookingResponse,
    dependencies=[Depends(booking_lookup_limiter)],
)
async def cancel_booking(
    code: str,
    dni: DniQuery,
    service: Annotated[BookingService, Depends(get_booking_service)],
    admin: Annotated[AdminUser | None, Depends(get_optional_admin)],
) -> Booking:
    """Cancel a pending or confirmed booking (guest or admin)."""
    actor = Actor.ADMIN if admin else Actor.GUEST
    return await service.cancel(code, dni, actor=actor)


# ============ ADMIN ============


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    q: str | None = Query(default=None, max_length=100),
) -> list[Booking]:
    """List bookings, newest first, filtered by status and free text (admin only)."""
    result = await db.execute(select(Booking).order_by(Booking.booking_date.desc()))
    return filter_bookings(result.scalars().all(), status=status_filter, text=q)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get a booking by ID (admin only)."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking", str(booking_id))
    return booking


@router.put("/code/{code}/confirm", response_model=BookingResponse)
async def confirm_booking(
    code: str,
    dni: DniQuery,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> Booking:
    """Confirm a pending booking (admin only)."""
    return await service.confirm(code, dni)


@router.put("/code/{code}/complete", response_model=BookingResponse)
async def complete_booking(
    code: str,
    dni: DniQuery,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> Booking:
    """Mark a confirmed booking as completed (admin only)."""
    return await service.complete(code, dni)


@router.delete("/delete/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: int,
    admin: Annotated[AdminUser, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a booking and its detail lines (admin only)."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking", str(booking_id))
    await db.delete(booking)
    logger.info(f"Booking {booking.booking_code} deleted by admin {admin.id}")
