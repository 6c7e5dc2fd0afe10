"""Shared fixtures: in-memory booking store and a SQLite-backed API client."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator, Iterable  # noqa: E402
from datetime import UTC, date, datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import nakanostay.models  # noqa: E402,F401
from nakanostay.core.exceptions import BookingCodeTaken, ConflictError  # noqa: E402
from nakanostay.core.middleware import booking_lookup_limiter, login_limiter  # noqa: E402
from nakanostay.core.security import create_tokens  # noqa: E402
from nakanostay.database import Base, get_db  # noqa: E402
from nakanostay.domain.booking_request import AdmittedBooking  # noqa: E402
from nakanostay.domain.booking_state import BookingStatus  # noqa: E402
from nakanostay.main import app  # noqa: E402
from nakanostay.models.booking import Booking, BookingDetail  # noqa: E402
from nakanostay.models.hotel import Hotel, Room  # noqa: E402
from nakanostay.models.user import AdminUser  # noqa: E402
from nakanostay.services.booking_store import BookingStore  # noqa: E402

VALID_DNI = "1710034065"
OTHER_VALID_DNI = "0926687856"

# Fixed clock for service tests: 2024-06-01 09:00 in Guayaquil
FIXED_NOW = datetime(2024, 6, 1, 14, 0, tzinfo=UTC)


def days_from_today(days: int) -> date:
    return date.today() + timedelta(days=days)


# ============ IN-MEMORY STORE ============


class InMemoryBookingStore(BookingStore):
    """BookingStore kept in dicts; ORM objects are used transiently."""

    def __init__(self) -> None:
        self.rooms: dict[int, Room] = {}
        self.bookings: dict[int, Booking] = {}
        self._next_booking_id = 1

    def add_room(
        self,
        room_id: int,
        price: str = "50.00",
        is_available: bool = True,
        hotel_id: int = 1,
    ) -> Room:
        room = Room(
            id=room_id,
            hotel_id=hotel_id,
            room_number=str(100 + room_id),
            room_type="Double",
            price_per_night=Decimal(price),
            is_available=is_available,
        )
        self.rooms[room_id] = room
        return room

    def add_booking(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        status: BookingStatus = BookingStatus.CONFIRMED,
        code: str | None = None,
        dni: str = VALID_DNI,
        guest_name: str = "Ana Torres",
    ) -> Booking:
        booking_id = self._next_booking_id
        self._next_booking_id += 1
        room = self.rooms[room_id]
        booking = Booking(
            id=booking_id,
            booking_code=code or f"NKS-EXIST{booking_id}",
            guest_name=guest_name,
            guest_dni=dni,
            guest_email="ana@example.com",
            booking_date=FIXED_NOW,
            check_in=check_in,
            check_out=check_out,
            status=status.value,
            total=room.price_per_night * (check_out - check_in).days,
            details=[
                BookingDetail(room_id=room_id, guests=1, price_at_booking=room.price_per_night)
            ],
        )
        self.bookings[booking_id] = booking
        return booking

    async def get_room(self, room_id: int) -> Room | None:
        return self.rooms.get(room_id)

    async def lock_rooms(self, room_ids: Iterable[int]) -> dict[int, Room]:
        return {rid: self.rooms[rid] for rid in sorted(set(room_ids)) if rid in self.rooms}

    async def list_bookings_for_room(
        self, room_id: int, statuses: Iterable[BookingStatus]
    ) -> list[Booking]:
        wanted = {BookingStatus(s).value for s in statuses}
        return [
            b
            for b in self.bookings.values()
            if b.status in wanted and any(d.room_id == room_id for d in b.details)
        ]

    async def insert_booking(self, admitted: AdmittedBooking) -> Booking:
        if any(b.booking_code == admitted.booking_code for b in self.bookings.values()):
            raise BookingCodeTaken(admitted.booking_code)
        booking_id = self._next_booking_id
        self._next_booking_id += 1
        booking = Booking(
            id=booking_id,
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
        self.bookings[booking_id] = booking
        return booking

    async def update_booking_status(
        self,
        booking_id: int,
        expected: BookingStatus,
        new_status: BookingStatus,
        changes: dict[str, Any] | None = None,
    ) -> Booking:
        booking = self.bookings[booking_id]
        if booking.status != expected.value:
            raise ConflictError("Booking status changed concurrently; reload and retry")
        booking.status = new_status.value
        for key, value in (changes or {}).items():
            setattr(booking, key, value)
        return booking

    async def get_booking_by_code(self, code: str) -> Booking | None:
        for booking in self.bookings.values():
            if booking.booking_code == code:
                return booking
        return None


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


# ============ API ============


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def no_rate_limit() -> None:
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[booking_lookup_limiter] = no_rate_limit
    app.dependency_overrides[login_limiter] = no_rate_limit

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin(session_factory) -> AdminUser:
    async with session_factory() as session:
        admin = AdminUser(
            email="admin@nakanostay.ec",
            password_hash="not-used-by-token-auth",
            full_name="Test Admin",
            is_active=True,
        )
        session.add(admin)
        await session.commit()
        return admin


@pytest.fixture
def admin_headers(admin: AdminUser) -> dict[str, str]:
    tokens = create_tokens(admin.id, admin.email)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
async def room(session_factory) -> Room:
    """Room 'R' at 50.00 per night in a seeded hotel."""
    async with session_factory() as session:
        hotel = Hotel(
            name="Hotel Nakano Quito",
            address="Av. Amazonas N24-03",
            city="Quito",
            stars=4,
            email="quito@nakanostay.ec",
        )
        session.add(hotel)
        await session.flush()
        room = Room(
            hotel_id=hotel.id,
            room_number="101",
            room_type="Double",
            price_per_night=Decimal("50.00"),
            is_available=True,
        )
        session.add(room)
        await session.commit()
        return room


def booking_payload(room_id: int, check_in: date, check_out: date, **overrides) -> dict:
    payload = {
        "guest_name": "Ana Torres",
        "guest_dni": VALID_DNI,
        "guest_email": "ana@example.com",
        "guest_phone": "0991234567",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "details": [{"room_id": room_id, "guests": 2}],
    }
    payload.update(overrides)
    return payload
