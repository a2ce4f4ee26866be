"""
CryptoDash - Dependencies
Dependency injection for FastAPI endpoints
"""
from fastapi import Depends, Request
from starlette.responses import Response

from cryptodash.config import Settings
from cryptodash.core.rate_limiter import AttemptLimiter
from cryptodash.core.session import SessionService
from cryptodash.data_providers.market_data import MarketDataService
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.schemas.user import UserPublic
from cryptodash.utils.exceptions import raise_unauthorized


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> StoreBackend:
    """Persistence backend chosen at startup."""
    return request.app.state.store


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_market_data_service(request: Request) -> MarketDataService:
    return request.app.state.market_data


def get_login_limiter(request: Request) -> AttemptLimiter:
    return request.app.state.login_limiter


def get_password_limiter(request: Request) -> AttemptLimiter:
    return request.app.state.password_limiter


def get_client_ip(request: Request) -> str:
    """
    Best-effort client address.

    Prefers the first X-Forwarded-For hop, then X-Real-IP, then the
    socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


def get_session_token(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
) -> str | None:
    return request.cookies.get(sessions.cookie_name)


def clear_cookie_headers(sessions: SessionService) -> dict[str, str]:
    """Headers that expire the session cookie, for use on error responses."""
    response = Response()
    sessions.clear_auth_cookie(response)
    return {"set-cookie": response.headers["set-cookie"]}


async def get_current_user_id(
    token: str | None = Depends(get_session_token),
    sessions: SessionService = Depends(get_session_service),
) -> str:
    """
    Resolve the caller's user id from the session cookie.

    Raises:
        HTTPException: 401 with the cookie cleared if the session is invalid
    """
    result = sessions.verify_session(token)
    if not result.authenticated or result.user is None:
        raise_unauthorized(
            result.error or "Not authenticated",
            headers=clear_cookie_headers(sessions) if token else None,
        )
    return result.user.id


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
    sessions: SessionService = Depends(get_session_service),
) -> UserPublic:
    """
    Load the caller from the store.

    A valid token for a user that no longer exists counts as unauthenticated.
    """
    user = await store.get_user_by_id(user_id)
    if user is None:
        raise_unauthorized("User not found", headers=clear_cookie_headers(sessions))
    return user
