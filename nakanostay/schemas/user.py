"""Admin authentication Pydantic schemas."""

from pydantic import BaseModel, EmailStr


class AdminLogin(BaseModel):
    """Schema for admin login."""

    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    """Schema for refreshing an access token."""

    refresh_token: str


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
