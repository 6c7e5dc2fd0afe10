"""Admin authentication endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nakanostay.api.deps import get_db
from nakanostay.core.exceptions import AuthenticationError
from nakanostay.core.middleware import login_limiter
from nakanostay.core.security import create_tokens, verify_password, verify_token
from nakanostay.models.user import AdminUser
from nakanostay.schemas.user import AdminLogin, RefreshTokenRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(
    credentials: AdminLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(AdminUser).where(AdminUser.email == credentials.email))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(credentials.password, admin.password_hash):
        logger.warning(f"Failed admin login for {credentials.email}")
        raise AuthenticationError("Invalid email or password")

    if not admin.is_active:
        raise AuthenticationError("Account is deactivated")

    admin.last_login_at = datetime.now(UTC)

    return TokenResponse(**create_tokens(admin.id, admin.email))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, token_type="refresh")
    admin_id = payload.get("sub")
    if not admin_id:
        raise AuthenticationError("Invalid token")

    result = await db.execute(select(AdminUser).where(AdminUser.id == int(admin_id)))
    admin = result.scalar_one_or_none()

    if not admin or not admin.is_active:
        raise AuthenticationError("Administrator not found or inactive")

    return TokenResponse(**create_tokens(admin.id, admin.email))
