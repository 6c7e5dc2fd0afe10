"""Room catalogue filters."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol


class HotelLike(Protocol):
    id: int
    name: str
    city: str | None
    stars: int | None


class RoomLike(Protocol):
    id: int
    hotel_id: int
    room_number: str
    room_type: str | None
    is_available: bool


@dataclass(frozen=True)
class RoomWithHotel:
    room: RoomLike
    hotel: HotelLike


@dataclass(frozen=True)
class RoomFilters:
    """Optional criteria, combined with AND."""

    stars: int | None = None
    city: str | None = None
    hotel_id: int | None = None
    room_type: str | None = None
    only_available: bool = False
    q: str | None = None

    def matches(self, item: RoomWithHotel) -> bool:
        room, hotel = item.room, item.hotel
        if self.stars is not None and hotel.stars != self.stars:
            return False
        if self.city is not None and hotel.city != self.city:
            return False
        if self.hotel_id is not None and hotel.id != self.hotel_id:
            return False
        if self.room_type is not None and room.room_type != self.room_type:
            return False
        if self.only_available and not room.is_available:
            return False
        query = (self.q or "").strip().lower()
        if query:
            return (
                query in hotel.name.lower()
                or query in room.room_number.lower()
                or query in (room.room_type or "").lower()
            )
        return True


def filter_rooms(items: Iterable[RoomWithHotel], filters: RoomFilters) -> list[RoomWithHotel]:
    return [item for item in items if filters.matches(item)]


@dataclass(frozen=True)
class FilterOptions:
    """Distinct values the catalogue can currently be filtered by."""

    cities: list[str]
    stars: list[int]
    hotels: list[HotelLike]
    room_types: list[str]


def filter_options(items: Iterable[RoomWithHotel]) -> FilterOptions:
    """Collect filter choices from the rooms on offer.

    Hotels without rooms contribute nothing. Blank cities and room types are
    skipped. Hotels are sorted by name, everything else by value.
    """
    items = list(items)
    hotels = {item.hotel.id: item.hotel for item in items}
    return FilterOptions(
        cities=sorted({item.hotel.city for item in items if item.hotel.city}),
        stars=sorted({item.hotel.stars for item in items if item.hotel.stars is not None}),
        hotels=sorted(hotels.values(), key=lambda hotel: (hotel.name, hotel.id)),
        room_types=sorted({item.room.room_type for item in items if item.room.room_type}),
    )
