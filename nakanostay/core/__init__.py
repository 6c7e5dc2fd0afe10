"""Core utilities and security modules."""

from nakanostay.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BookingCodeTaken,
    ConflictError,
    DatesNotAvailable,
    InvalidTransition,
    NotFoundError,
    RateLimitExceeded,
    ValidationError,
)
from nakanostay.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BookingCodeTaken",
    "ConflictError",
    "DatesNotAvailable",
    "InvalidTransition",
    "NotFoundError",
    "RateLimitExceeded",
    "ValidationError",
    "create_access_token",
    "create_refresh_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
