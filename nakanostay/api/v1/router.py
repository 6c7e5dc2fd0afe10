"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from nakanostay.api.v1 import auth, bookings, hotels, rooms

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Hotels
api_router.include_router(hotels.router, prefix="/hotels", tags=["Hotels"])

# Rooms
api_router.include_router(rooms.router, prefix="/rooms", tags=["Rooms"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
