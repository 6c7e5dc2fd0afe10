"""Booking lifecycle service.

Glues the pure booking rules in ``nakanostay.domain`` to a ``BookingStore``:

- submit: validate a request, lock its rooms, re-check availability, insert
  a PENDING booking with prices snapshotted from the rooms
- confirm / cancel / complete: status machine transitions with a
  conditional write
- guest lookup by booking code + identity number
- room availability over a date window
"""

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from nakanostay.config import settings
from nakanostay.core.exceptions import (
    BookingCodeTaken,
    DatesNotAvailable,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from nakanostay.domain.availability import RoomAvailability, free_nights, is_range_free
from nakanostay.domain.booking_request import (
    BookingCandidate,
    admit,
    check_rooms,
    validate_candidate,
)
from nakanostay.domain.booking_search import match_code_and_identity
from nakanostay.domain.booking_state import (
    ACTIVE_STATUSES,
    Actor,
    BookingStatus,
    assert_booking_transition,
)
from nakanostay.models.booking import Booking
from nakanostay.services.booking_store import BookingStore, stamp_for
from nakanostay.utils.booking_code import generate_booking_code, normalize_booking_code
from nakanostay.utils.validators import mask_sensitive_data

logger = logging.getLogger(__name__)

CODE_INSERT_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(UTC)


class BookingService:
    """Service for creating bookings and moving them through their lifecycle."""

    def __init__(self, store: BookingStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def today(self) -> date:
        """Current calendar date where the hotels are."""
        return self.clock().astimezone(ZoneInfo(settings.booking_timezone)).date()

    # ============ CREATION ============

    async def submit(self, candidate: BookingCandidate) -> Booking:
        """Validate and persist a new booking in PENDING.

        Raises:
            ValidationError: request is malformed (every broken field listed)
            NotFoundError: a requested room does not exist
            DatesNotAvailable: a room is switched off or already booked
            BookingCodeTaken: every drawn code lost an insert race
        """
        violations = validate_candidate(
            candidate, self.today(), max_guests=settings.max_guests_per_room
        )
        if violations:
            raise ValidationError(
                "Booking request is invalid",
                errors=[v.as_dict() for v in violations],
            )

        rooms = await self.store.lock_rooms(candidate.room_ids)
        for room_id in candidate.room_ids:
            if room_id not in rooms:
                raise NotFoundError("Room", str(room_id))

        stays_by_room = {
            room_id: await self.store.list_bookings_for_room(room_id, ACTIVE_STATUSES)
            for room_id in candidate.room_ids
        }
        conflicts = check_rooms(candidate, rooms, stays_by_room)
        if conflicts:
            logger.warning(
                f"Booking rejected for rooms {candidate.room_ids} "
                f"{candidate.check_in}..{candidate.check_out}: "
                f"{', '.join(c.code for c in conflicts)}"
            )
            raise DatesNotAvailable(errors=[c.as_dict() for c in conflicts])

        booking = None
        for _ in range(CODE_INSERT_ATTEMPTS):
            code = await generate_booking_code(self.store)
            admitted = admit(candidate, rooms, booking_code=code, now=self.clock())
            try:
                booking = await self.store.insert_booking(admitted)
                break
            except BookingCodeTaken:
                logger.warning(f"Booking code {code} was taken concurrently, drawing another")
        if booking is None:
            raise BookingCodeTaken(code)

        logger.info(
            f"Booking {booking.booking_code} created for guest "
            f"{mask_sensitive_data(booking.guest_dni)}: rooms {candidate.room_ids}, "
            f"{booking.check_in}..{booking.check_out}, total {booking.total}"
        )
        return booking

    # ============ LOOKUP ============

    async def find_by_code_and_identity(self, code: str, identity: str) -> Booking:
        """Guest lookup; any mismatch is a plain NotFoundError."""
        booking = await self.store.get_booking_by_code(normalize_booking_code(code))
        return match_code_and_identity(booking, code, identity)

    # ============ TRANSITIONS ============

    async def transition(
        self,
        booking: Booking,
        target: BookingStatus,
        actor: Actor,
    ) -> Booking:
        """Apply one status machine transition and persist it.

        Raises:
            AuthorizationError: actor may not request ``target``
            InvalidTransition: ``target`` unreachable from the current status
            ConflictError: status changed between read and write
        """
        current = BookingStatus(booking.status)
        try:
            target = assert_booking_transition(current, target, actor)
        except InvalidTransition:
            logger.warning(
                f"Rejected {actor.value} transition of {booking.booking_code}: "
                f"{current.value} → {getattr(target, 'value', target)}"
            )
            raise

        changes = stamp_for(target, self.clock())
        if target is BookingStatus.CANCELLED:
            changes["cancelled_by"] = actor.value

        updated = await self.store.update_booking_status(booking.id, current, target, changes)
        logger.info(
            f"Booking {updated.booking_code} {current.value} → {target.value} by {actor.value}"
        )
        return updated

    async def confirm(self, code: str, identity: str) -> Booking:
        booking = await self.find_by_code_and_identity(code, identity)
        return await self.transition(booking, BookingStatus.CONFIRMED, Actor.ADMIN)

    async def cancel(self, code: str, identity: str, actor: Actor = Actor.GUEST) -> Booking:
        booking = await self.find_by_code_and_identity(code, identity)
        return await self.transition(booking, BookingStatus.CANCELLED, actor)

    async def complete(self, code: str, identity: str) -> Booking:
        booking = await self.find_by_code_and_identity(code, identity)
        return await self.transition(booking, BookingStatus.COMPLETED, Actor.ADMIN)

    # ============ AVAILABILITY ============

    async def room_availability(
        self, room_id: int, range_start: date, range_end: date
    ) -> RoomAvailability:
        """Free nights of a room inside [range_start, range_end)."""
        if range_end <= range_start:
            raise ValidationError(
                "Invalid date window",
                errors=[{
                    "field": "endDate",
                    "code": "end_not_after_start",
                    "message": "endDate must be after startDate",
                }],
            )
        if range_end - range_start > timedelta(days=settings.max_availability_window_days):
            raise ValidationError(
                "Invalid date window",
                errors=[{
                    "field": "endDate",
                    "code": "window_too_long",
                    "message": f"Window cannot exceed {settings.max_availability_window_days} days",
                }],
            )

        room = await self.store.get_room(room_id)
        if room is None:
            raise NotFoundError("Room", str(room_id))

        stays = await self.store.list_bookings_for_room(room_id, ACTIVE_STATUSES)
        return free_nights(stays, range_start, range_end, room_available=room.is_available)

    async def is_range_free(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: int | None = None,
    ) -> bool:
        if check_out <= check_in:
            raise ValidationError("Check-out date must be after check-in date")
        room = await self.store.get_room(room_id)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        stays = await self.store.list_bookings_for_room(room_id, ACTIVE_STATUSES)
        return is_range_free(
            stays,
            check_in,
            check_out,
            exclude_booking_id=exclude_booking_id,
            room_available=room.is_available,
        )
