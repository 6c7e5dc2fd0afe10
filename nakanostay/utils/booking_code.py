"""Booking code generation utilities."""

from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING

from nakanostay.config import settings

if TYPE_CHECKING:
    from nakanostay.services.booking_store import BookingStore

# No 0/O or 1/I: guests read these codes aloud and type them back
BOOKING_CODE_ALPHABET = "".join(
    c for c in string.ascii_uppercase + string.digits if c not in "0O1I"
)
MAX_ATTEMPTS = 20


def random_booking_code(prefix: str | None = None, length: int | None = None) -> str:
    """Build a booking code like 'NKS-A3B7K9' without checking uniqueness."""
    prefix = prefix or settings.booking_code_prefix
    length = length or settings.booking_code_length
    random_part = "".join(secrets.choice(BOOKING_CODE_ALPHABET) for _ in range(length))
    return f"{prefix}-{random_part}"


def normalize_booking_code(code: str) -> str:
    """Canonical form used for storage and lookups."""
    return code.strip().upper()


async def generate_booking_code(store: BookingStore) -> str:
    """Generate a booking code that is not used by any stored booking.

    Args:
        store: Booking store used for the uniqueness check

    Returns:
        str: Unique booking code like 'NKS-A3B7K9'
    """
    for _ in range(MAX_ATTEMPTS):
        code = random_booking_code()
        if await store.get_booking_by_code(code) is None:
            return code
    raise RuntimeError("Could not allocate a unique booking code")
