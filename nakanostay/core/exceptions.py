"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_content(self) -> dict[str, Any]:
        """Body rendered by the application exception handler."""
        return {"detail": self.detail}


class ValidationError(AppException):
    """Validation error exception.

    ``errors`` holds one ``{"field", "code", "message"}`` entry per broken
    rule so clients can tell the failures apart.
    """

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        if self.errors:
            content["errors"] = self.errors
        return content


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(AppException):
    """State conflict exception."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        if self.errors:
            content["errors"] = self.errors
        return content


class DatesNotAvailable(ConflictError):
    """Dates not available exception."""

    def __init__(
        self,
        detail: str = "The selected dates are not available",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(detail=detail, errors=errors)


class BookingCodeTaken(ConflictError):
    """Another booking was stored with the same code first."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(detail="Could not allocate a unique booking code")


class InvalidTransition(ConflictError):
    """Booking status transition not allowed from the current status."""

    def __init__(self, current_status: str, target_status: str) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            detail=f"Invalid booking transition: {current_status} → {target_status}"
        )

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        content["current_status"] = self.current_status
        content["target_status"] = self.target_status
        return content


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
