"""
CryptoDash - Custom Exceptions
Application-specific exceptions with HTTP error handling
"""
import math
from typing import Optional, Any, Dict
from fastapi import HTTPException, status


class CryptoDashException(Exception):
    """Base exception for CryptoDash."""

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Authentication Exceptions
# =========================

class AuthenticationError(CryptoDashException):
    """Authentication related errors."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, code="INVALID_CREDENTIALS")


class TokenExpiredError(AuthenticationError):
    """Token has expired."""

    def __init__(self, message: str = "Token expired"):
        super().__init__(message=message, code="TOKEN_EXPIRED")


class InvalidTokenError(AuthenticationError):
    """Token is invalid."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, code="INVALID_TOKEN")


class AuthenticationRequiredError(AuthenticationError):
    """No valid session on a protected operation."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, code="AUTHENTICATION_REQUIRED")


class TokenSigningError(AuthenticationError):
    """Session token could not be signed (configuration error)."""

    def __init__(self, message: str = "Could not sign session token"):
        super().__init__(message=message, code="TOKEN_SIGNING_FAILED")


# =========================
# User Exceptions
# =========================

class UserError(CryptoDashException):
    """User related errors."""
    pass


class UserNotFoundError(UserError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, code="USER_NOT_FOUND")


class EmailAlreadyRegisteredError(UserError):
    """Email already registered."""

    def __init__(self, message: str = "A user with this email already exists"):
        super().__init__(message=message, code="EMAIL_REGISTERED")


# =========================
# Favorite Exceptions
# =========================

class FavoriteError(CryptoDashException):
    """Favorite related errors."""
    pass


class DuplicateFavoriteError(FavoriteError):
    """Symbol is already in the user's favorites."""

    def __init__(self, symbol: str = ""):
        message = (
            f"'{symbol}' is already in your favorites" if symbol
            else "Already in your favorites"
        )
        super().__init__(message=message, code="DUPLICATE_FAVORITE")


# =========================
# Rate Limit Exceptions
# =========================

class RateLimitExceededError(CryptoDashException):
    """Too many attempts on a sensitive operation."""

    def __init__(self, retry_after: float, message: str = "Too many attempts. Please try again later."):
        super().__init__(
            message=message,
            code="RATE_LIMIT_EXCEEDED",
            details={"retry_after": retry_after}
        )
        self.retry_after = retry_after


# =========================
# Market Data Exceptions
# =========================

class MarketDataError(CryptoDashException):
    """Market data related errors."""
    pass


class UpstreamStatusError(MarketDataError):
    """Upstream API answered with a non-2xx status."""

    def __init__(self, status_code: int, provider: str = "coingecko"):
        super().__init__(
            message=f"{provider}: HTTP {status_code}",
            code="UPSTREAM_STATUS",
            details={"status_code": status_code}
        )
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == status.HTTP_429_TOO_MANY_REQUESTS


class UpstreamUnavailableError(MarketDataError):
    """Upstream API failed and no cached fallback exists."""

    def __init__(self, message: str = "Unable to fetch market data"):
        super().__init__(message=message, code="UPSTREAM_UNAVAILABLE")


# =========================
# HTTP Exception Helpers
# =========================

def raise_not_found(message: str = "Resource not found"):
    """Raise 404 Not Found exception."""
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=message
    )


def raise_bad_request(message: str = "Bad request"):
    """Raise 400 Bad Request exception."""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=message
    )


def raise_unauthorized(message: str = "Not authenticated", headers: Optional[Dict[str, str]] = None):
    """Raise 401 Unauthorized exception."""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers=headers
    )


def raise_conflict(message: str = "Conflict"):
    """Raise 409 Conflict exception."""
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=message
    )


def raise_too_many_requests(retry_after: float, message: str = "Too many attempts. Please try again later."):
    """Raise 429 Too Many Requests exception with a Retry-After hint."""
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=message,
        headers={"Retry-After": str(max(1, math.ceil(retry_after)))}
    )


def raise_service_unavailable(message: str = "Service unavailable"):
    """Raise 503 Service Unavailable exception."""
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=message
    )
