"""Booking state machine.

States: pending → confirmed → completed, with pending/confirmed → cancelled.
Cancelled and completed are terminal.
"""

from enum import Enum

from nakanostay.core.exceptions import AuthorizationError, InvalidTransition


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Actor(str, Enum):
    """Who is requesting a transition."""

    GUEST = "guest"
    ADMIN = "admin"


INITIAL_STATUS = BookingStatus.PENDING

BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

# Who may move a booking into each target status
TRANSITION_ACTORS: dict[BookingStatus, set[Actor]] = {
    BookingStatus.CONFIRMED: {Actor.ADMIN},
    BookingStatus.CANCELLED: {Actor.GUEST, Actor.ADMIN},
    BookingStatus.COMPLETED: {Actor.ADMIN},
}

# Non-terminal statuses occupy their nights
ACTIVE_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)
TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)


def is_terminal(status: str | BookingStatus) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def assert_booking_transition(
    current: str | BookingStatus,
    target: str | BookingStatus,
    actor: Actor = Actor.ADMIN,
) -> BookingStatus:
    """Check that ``actor`` may move a booking from ``current`` to ``target``.

    The actor is checked before the current status.

    Returns:
        BookingStatus: the validated target status

    Raises:
        AuthorizationError: actor may not request ``target``
        InvalidTransition: ``target`` is not reachable from ``current``
    """
    current = BookingStatus(current)
    try:
        target = BookingStatus(target)
    except ValueError:
        raise InvalidTransition(current.value, str(target))

    allowed_actors = TRANSITION_ACTORS.get(target)
    if allowed_actors is None:
        # Nothing ever transitions into the initial status
        raise InvalidTransition(current.value, target.value)
    if actor not in allowed_actors:
        raise AuthorizationError(f"Only an administrator can mark a booking as {target.value}")

    if target not in BOOKING_TRANSITIONS[current]:
        raise InvalidTransition(current.value, target.value)
    return target
