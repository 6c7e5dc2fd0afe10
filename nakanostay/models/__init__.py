"""Database models."""

from nakanostay.models.booking import Booking, BookingDetail
from nakanostay.models.hotel import Hotel, Room
from nakanostay.models.user import AdminUser

__all__ = [
    # Hotel
    "Hotel",
    "Room",
    # Booking
    "Booking",
    "BookingDetail",
    # Admin
    "AdminUser",
]
