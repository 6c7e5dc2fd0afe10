"""Room availability at night granularity.

A stay occupies the half-open interval [check_in, check_out): the check-out
day itself is free for the next guest to check in.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol

from nakanostay.domain.booking_state import ACTIVE_STATUSES, BookingStatus


class Stay(Protocol):
    """Anything with a booking id, a status and a date range."""

    id: int | None
    status: str
    check_in: date
    check_out: date


@dataclass(frozen=True, order=True)
class DateRange:
    """Half-open date interval [start, end)."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Range end {self.end} must be after start {self.start}")

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def overlaps(self, other: DateRange) -> bool:
        return self.start < other.end and other.start < self.end

    def __contains__(self, day: date) -> bool:
        return self.start <= day < self.end

    def days(self) -> Iterator[date]:
        """Each occupied night, by its calendar date."""
        for offset in range(self.nights):
            yield self.start + timedelta(days=offset)


@dataclass
class RoomAvailability:
    """Free nights and occupied ranges of one room inside a window."""

    available_dates: list[date] = field(default_factory=list)
    occupied_ranges: list[DateRange] = field(default_factory=list)


def nights_between(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def occupying_stays(stays: Iterable[Stay]) -> list[Stay]:
    """Stays whose status still holds their nights (pending or confirmed)."""
    return [s for s in stays if BookingStatus(s.status) in ACTIVE_STATUSES]


def is_range_free(
    stays: Iterable[Stay],
    check_in: date,
    check_out: date,
    exclude_booking_id: int | None = None,
    room_available: bool = True,
) -> bool:
    """True iff no occupying stay intersects [check_in, check_out).

    Args:
        stays: Bookings of a single room (any status)
        check_in: Candidate first night
        check_out: Candidate departure day (exclusive)
        exclude_booking_id: Booking to ignore, for re-validating a booking
            against everything but itself
        room_available: Room-level switch; False blocks every date

    Raises:
        ValueError: check_out is not after check_in
    """
    candidate = DateRange(check_in, check_out)
    if not room_available:
        return False
    for stay in occupying_stays(stays):
        if exclude_booking_id is not None and stay.id == exclude_booking_id:
            continue
        if candidate.overlaps(DateRange(stay.check_in, stay.check_out)):
            return False
    return True


def conflicting_stays(
    stays: Iterable[Stay],
    check_in: date,
    check_out: date,
    exclude_booking_id: int | None = None,
) -> list[Stay]:
    """Occupying stays that intersect [check_in, check_out)."""
    candidate = DateRange(check_in, check_out)
    return [
        stay
        for stay in occupying_stays(stays)
        if (exclude_booking_id is None or stay.id != exclude_booking_id)
        and candidate.overlaps(DateRange(stay.check_in, stay.check_out))
    ]


def free_nights(
    stays: Iterable[Stay],
    range_start: date,
    range_end: date,
    room_available: bool = True,
) -> RoomAvailability:
    """Complement of the occupied nights within [range_start, range_end).

    ``occupied_ranges`` lists the full range of every occupying stay that
    touches the window, sorted by start. When the room is switched off no
    date is available, whatever the bookings say.
    """
    window = DateRange(range_start, range_end)
    occupied = sorted(
        DateRange(s.check_in, s.check_out)
        for s in occupying_stays(stays)
        if window.overlaps(DateRange(s.check_in, s.check_out))
    )

    if not room_available:
        return RoomAvailability(available_dates=[], occupied_ranges=occupied)

    taken: set[date] = set()
    for stay_range in occupied:
        taken.update(stay_range.days())

    return RoomAvailability(
        available_dates=[day for day in window.days() if day not in taken],
        occupied_ranges=occupied,
    )
