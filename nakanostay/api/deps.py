"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.core.exceptions import AuthenticationError
from nakanostay.core.security import verify_token
from nakanostay.database import get_db
from nakanostay.models.user import AdminUser
from nakanostay.services.booking_service import BookingService
from nakanostay.services.booking_store import SqlBookingStore

# Security scheme
security = HTTPBearer(auto_error=False)

__all__ = [
    "get_booking_service",
    "get_current_admin",
    "get_db",
    "get_optional_admin",
]


async def _admin_from_token(token: str, db: AsyncSession) -> AdminUser:
    payload = verify_token(token, token_type="access")
    admin_id = payload.get("sub")
    if not admin_id or payload.get("role") != "admin":
        raise AuthenticationError("Invalid token payload")

    result = await db.execute(select(AdminUser).where(AdminUser.id == int(admin_id)))
    admin = result.scalar_one_or_none()

    if not admin:
        raise AuthenticationError("Administrator not found")
    if not admin.is_active:
        raise AuthenticationError("Administrator account is deactivated")
    return admin


async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminUser:
    """Get the authenticated administrator from the bearer token."""
    if not credentials:
        raise AuthenticationError("Not authenticated")
    return await _admin_from_token(credentials.credentials, db)


async def get_optional_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminUser | None:
    """The administrator if a valid token was sent, otherwise None (guest)."""
    if not credentials:
        return None
    try:
        return await _admin_from_token(credentials.credentials, db)
    except AuthenticationError:
        return None


async def get_booking_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingService:
    return BookingService(SqlBookingStore(db))
