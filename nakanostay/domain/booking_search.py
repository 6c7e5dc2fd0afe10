"""Guest lookup by possession and in-memory booking filters."""

from __future__ import annotations

import hmac
from collections.abc import Iterable
from typing import Protocol, TypeVar

from nakanostay.core.exceptions import NotFoundError
from nakanostay.domain.booking_state import BookingStatus
from nakanostay.utils.booking_code import normalize_booking_code


class Searchable(Protocol):
    booking_code: str
    guest_dni: str
    guest_name: str
    status: str


B = TypeVar("B", bound=Searchable)


def booking_not_found() -> NotFoundError:
    """The one error every failed guest lookup produces."""
    return NotFoundError("Booking")


def match_code_and_identity(booking: B | None, code: str, identity: str) -> B:
    """Return ``booking`` only if both credentials match it.

    A wrong code and a right code with the wrong identity number raise the
    same ``NotFoundError``, so callers cannot tell which one was wrong.
    """
    if booking is None:
        raise booking_not_found()

    code_ok = hmac.compare_digest(
        normalize_booking_code(booking.booking_code).encode(),
        normalize_booking_code(code).encode(),
    )
    identity_ok = hmac.compare_digest(
        booking.guest_dni.encode(), identity.strip().encode()
    )
    if not (code_ok and identity_ok):
        raise booking_not_found()
    return booking


def filter_bookings(
    bookings: Iterable[B],
    status: str | BookingStatus | None = None,
    text: str | None = None,
) -> list[B]:
    """Bookings matching an exact status and a free-text query.

    The query is matched case-insensitively as a substring of the booking
    code, the guest identity number or the guest name. A missing status or
    a blank query matches everything. Input order is kept.
    """
    wanted = BookingStatus(status) if status else None
    query = text.strip().lower() if text else ""

    result = []
    for booking in bookings:
        if wanted is not None and BookingStatus(booking.status) != wanted:
            continue
        if query and not (
            query in booking.booking_code.lower()
            or query in booking.guest_dni.lower()
            or query in booking.guest_name.lower()
        ):
            continue
        result.append(booking)
    return result
