"""Admission rules and pricing for new bookings.

Pure decision logic: callers fetch rooms and their bookings, these functions
decide. Field-level rules are all evaluated so a guest sees every problem in
one round-trip; room availability is only judged once the request itself is
well formed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from nakanostay.domain.availability import Stay, conflicting_stays, nights_between
from nakanostay.domain.booking_state import INITIAL_STATUS, BookingStatus
from nakanostay.utils.validators import (
    is_valid_email,
    validate_cedula,
    validate_ecuadorian_phone,
)

CENTS = Decimal("0.01")
MIN_GUESTS_PER_ROOM = 1


class PricedRoom(Protocol):
    """Room attributes the validator reads."""

    id: int
    price_per_night: Decimal
    is_available: bool


@dataclass(frozen=True)
class BookingLine:
    """One requested room."""

    room_id: int
    guests: int


@dataclass(frozen=True)
class BookingCandidate:
    """A prospective booking as submitted by a guest."""

    guest_name: str
    guest_dni: str
    guest_email: str
    check_in: date
    check_out: date
    details: tuple[BookingLine, ...]
    guest_phone: str | None = None

    @property
    def nights(self) -> int:
        return nights_between(self.check_in, self.check_out)

    @property
    def room_ids(self) -> list[int]:
        return sorted({line.room_id for line in self.details})


@dataclass(frozen=True)
class RuleViolation:
    """A single broken admission rule."""

    field: str
    code: str
    message: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PricedLine:
    room_id: int
    guests: int
    price_at_booking: Decimal


@dataclass(frozen=True)
class AdmittedBooking:
    """A validated booking ready to be persisted."""

    booking_code: str
    guest_name: str
    guest_dni: str
    guest_email: str
    guest_phone: str | None
    booking_date: datetime
    check_in: date
    check_out: date
    status: BookingStatus
    total: Decimal
    details: tuple[PricedLine, ...]


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def check_guest_data(candidate: BookingCandidate) -> list[RuleViolation]:
    """Rule 1: guest name, email and identity number."""
    violations: list[RuleViolation] = []

    if not candidate.guest_name or not candidate.guest_name.strip():
        violations.append(RuleViolation("guest_name", "blank", "Guest name is required"))

    if not candidate.guest_email or not candidate.guest_email.strip():
        violations.append(RuleViolation("guest_email", "blank", "Guest email is required"))
    elif not is_valid_email(candidate.guest_email):
        violations.append(
            RuleViolation("guest_email", "invalid_email", "Guest email is not a valid address")
        )

    identity = validate_cedula(candidate.guest_dni)
    if not identity.valid:
        violations.append(RuleViolation("guest_dni", identity.reason.value, identity.message))

    if candidate.guest_phone and not validate_ecuadorian_phone(candidate.guest_phone):
        violations.append(
            RuleViolation("guest_phone", "invalid_phone", "Guest phone is not a valid number")
        )

    return violations


def check_dates(candidate: BookingCandidate, today: date) -> list[RuleViolation]:
    """Rule 2: check-in not in the past, check-out strictly after check-in."""
    violations: list[RuleViolation] = []
    if candidate.check_in < today:
        violations.append(
            RuleViolation("check_in", "check_in_in_past", "Check-in date cannot be in the past")
        )
    if candidate.check_out <= candidate.check_in:
        violations.append(
            RuleViolation(
                "check_out",
                "check_out_not_after_check_in",
                "Check-out date must be after check-in date",
            )
        )
    return violations


def check_lines(candidate: BookingCandidate, max_guests: int | None = None) -> list[RuleViolation]:
    """Rule 3: at least one room, each with a sensible guest count."""
    if not candidate.details:
        return [RuleViolation("details", "no_rooms", "At least one room must be requested")]

    violations: list[RuleViolation] = []
    seen: set[int] = set()
    for index, line in enumerate(candidate.details):
        if line.guests < MIN_GUESTS_PER_ROOM:
            violations.append(
                RuleViolation(
                    f"details[{index}].guests",
                    "guests_below_minimum",
                    "Each room needs at least one guest",
                )
            )
        elif max_guests is not None and line.guests > max_guests:
            violations.append(
                RuleViolation(
                    f"details[{index}].guests",
                    "guests_above_maximum",
                    f"A room can host at most {max_guests} guests",
                )
            )
        if line.room_id in seen:
            violations.append(
                RuleViolation(
                    f"details[{index}].room_id",
                    "duplicate_room",
                    f"Room {line.room_id} is requested more than once",
                )
            )
        seen.add(line.room_id)
    return violations


def validate_candidate(
    candidate: BookingCandidate,
    today: date,
    max_guests: int | None = None,
) -> list[RuleViolation]:
    """Every field-level violation (rules 1-3), in rule order."""
    return (
        check_guest_data(candidate)
        + check_dates(candidate, today)
        + check_lines(candidate, max_guests)
    )


def check_rooms(
    candidate: BookingCandidate,
    rooms: Mapping[int, PricedRoom],
    stays_by_room: Mapping[int, Sequence[Stay]],
) -> list[RuleViolation]:
    """Rule 4: every room is switched on and free for the whole stay."""
    violations: list[RuleViolation] = []
    for index, line in enumerate(candidate.details):
        room = rooms[line.room_id]
        field_name = f"details[{index}].room_id"
        if not room.is_available:
            violations.append(
                RuleViolation(field_name, "room_unavailable", f"Room {room.id} is not available")
            )
            continue
        clashes = conflicting_stays(
            stays_by_room.get(line.room_id, ()), candidate.check_in, candidate.check_out
        )
        if clashes:
            first = min(max(s.check_in, candidate.check_in) for s in clashes)
            violations.append(
                RuleViolation(
                    field_name,
                    "dates_overlap",
                    f"Room {room.id} is already booked on {first.isoformat()}",
                )
            )
    return violations


def compute_total(lines: Sequence[PricedLine], nights: int) -> Decimal:
    """Sum of price_at_booking × nights over all lines."""
    total = sum((line.price_at_booking * nights for line in lines), Decimal("0"))
    return quantize_money(total)


def admit(
    candidate: BookingCandidate,
    rooms: Mapping[int, PricedRoom],
    booking_code: str,
    now: datetime,
) -> AdmittedBooking:
    """Rule 5: snapshot prices, compute the total and build a PENDING booking.

    Only call after ``validate_candidate`` and ``check_rooms`` came back empty.
    """
    lines = tuple(
        PricedLine(
            room_id=line.room_id,
            guests=line.guests,
            price_at_booking=quantize_money(Decimal(rooms[line.room_id].price_per_night)),
        )
        for line in candidate.details
    )
    return AdmittedBooking(
        booking_code=booking_code,
        guest_name=candidate.guest_name.strip(),
        guest_dni=candidate.guest_dni,
        guest_email=candidate.guest_email.strip(),
        guest_phone=candidate.guest_phone.strip() if candidate.guest_phone else None,
        booking_date=now,
        check_in=candidate.check_in,
        check_out=candidate.check_out,
        status=INITIAL_STATUS,
        total=compute_total(lines, candidate.nights),
        details=lines,
    )
