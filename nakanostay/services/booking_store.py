"""Booking persistence interface and its SQLAlchemy implementation.

The booking service reads and writes through a ``BookingStore``; stores hold
no booking rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.core.exceptions import BookingCodeTaken, ConflictError
from nakanostay.domain.booking_request import AdmittedBooking
from nakanostay.domain.booking_state import BookingStatus
from nakanostay.models.booking import Booking, BookingDetail
from nakanostay.models.hotel import Room


class BookingStore(ABC):
    """Reads and writes the booking service depends on."""

    @abstractmethod
    async def get_room(self, room_id: int) -> Room | None:
        """Fetch one room."""

    @abstractmethod
    async def lock_rooms(self, room_ids: Iterable[int]) -> dict[int, Room]:
        """Fetch rooms and hold them until the transaction ends.

        Two requests booking the same room serialize here, so the
        availability re-check and the insert that follow are atomic.
        """

    @abstractmethod
    async def list_bookings_for_room(
        self, room_id: int, statuses: Iterable[BookingStatus]
    ) -> list[Booking]:
        """Bookings with a detail line on ``room_id`` in one of ``statuses``."""

    @abstractmethod
    async def insert_booking(self, admitted: AdmittedBooking) -> Booking:
        """Persist a validated booking and its detail lines.

        Raises:
            BookingCodeTaken: another booking already holds the code
        """

    @abstractmethod
    async def update_booking_status(
        self,
        booking_id: int,
        expected: BookingStatus,
        new_status: BookingStatus,
        changes: dict[str, Any] | None = None,
    ) -> Booking:
        """Move a booking to ``new_status`` if it is still in ``expected``.

        Raises:
            ConflictError: the stored status changed underneath the caller
        """

    @abstractmethod
    async def get_booking_by_code(self, code: str) -> Booking | None:
        """Fetch a booking by its code."""


class SqlBookingStore(BookingStore):
    """``BookingStore`` over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_room(self, room_id: int) -> Room | None:
        result = await self.db.execute(select(Room).where(Room.id == room_id))
        return result.scalar_one_or_none()

    async def lock_rooms(self, room_ids: Iterable[int]) -> dict[int, Room]:
        # Ascending id order keeps lock acquisition deadlock-free
        result = await self.db.execute(
            select(Room)
            .where(Room.id.in_(sorted(set(room_ids))))
            .order_by(Room.id)
            .with_for_update()
        )
        return {room.id: room for room in result.scalars().all()}

    async def list_bookings_for_room(
        self, room_id: int, statuses: Iterable[BookingStatus]
    ) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .join(BookingDetail, BookingDetail.booking_id == Booking.id)
            .where(
                BookingDetail.room_id == room_id,
                Booking.status.in_([BookingStatus(s).value for s in statuses]),
            )
            .order_by(Booking.check_in)
            .distinct()
        )
        return list(result.scalars().all())

    async def insert_booking(self, admitted: AdmittedBooking) -> Booking:
        booking = Booking(
            booking_code=admitted.booking_code,
            guest_name=admitted.guest_name,
            guest_dni=admitted.guest_dni,
            guest_email=admitted.guest_email,
            guest_phone=admitted.guest_phone,
            booking_date=admitted.booking_date,
            check_in=admitted.check_in,
            check_out=admitted.check_out,
            status=admitted.status.value,
            total=admitted.total,
            details=[
                BookingDetail(
                    room_id=line.room_id,
                    guests=line.guests,
                    price_at_booking=line.price_at_booking,
                )
                for line in admitted.details
            ],
        )
        try:
            # Rolls back to here on a duplicate code; room locks stay held
            async with self.db.begin_nested():
                self.db.add(booking)
                await self.db.flush()
        except IntegrityError as e:
            if await self.get_booking_by_code(admitted.booking_code) is not None:
                raise BookingCodeTaken(admitted.booking_code) from e
            raise
        return booking

    async def update_booking_status(
        self,
        booking_id: int,
        expected: BookingStatus,
        new_status: BookingStatus,
        changes: dict[str, Any] | None = None,
    ) -> Booking:
        values: dict[str, Any] = {"status": new_status.value, **(changes or {})}
        result = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError("Booking status changed concurrently; reload and retry")

        booking = await self.db.get(Booking, booking_id, populate_existing=True)
        return booking

    async def get_booking_by_code(self, code: str) -> Booking | None:
        result = await self.db.execute(select(Booking).where(Booking.booking_code == code))
        return result.scalar_one_or_none()


def stamp_for(status: BookingStatus, now: datetime) -> dict[str, Any]:
    """Audit timestamp column set alongside a status change."""
    column = {
        BookingStatus.CONFIRMED: "confirmed_at",
        BookingStatus.CANCELLED: "cancelled_at",
        BookingStatus.COMPLETED: "completed_at",
    }.get(status)
    return {column: now} if column else {}
