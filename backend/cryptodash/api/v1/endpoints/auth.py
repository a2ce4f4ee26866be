"""
CryptoDash - Authentication Endpoints
Cookie-based sessions: register, login, logout and session checks
"""
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from cryptodash.config import Settings
from cryptodash.core.password_policy import validate_password
from cryptodash.core.rate_limiter import AttemptLimiter
from cryptodash.core.session import SessionService
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.dependencies import (
    get_client_ip,
    get_current_user,
    get_login_limiter,
    get_session_service,
    get_session_token,
    get_settings,
    get_store,
)
from cryptodash.schemas.user import (
    LoginRequest,
    LoginResponse,
    Message,
    RegisterResponse,
    SessionResponse,
    UserPublic,
    UserRegister,
)
from cryptodash.utils.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    RateLimitExceededError,
    raise_bad_request,
    raise_too_many_requests,
)

router = APIRouter()


def unauthenticated_response(sessions: SessionService, error: str | None) -> JSONResponse:
    """401 session answer that also expires the cookie."""
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"authenticated": False, "user": None, "error": error or "Not authenticated"},
    )
    sessions.clear_auth_cookie(response)
    return response


@router.post(
    "/register",
    response_model=RegisterResponse,
    summary="Register a new user",
)
async def register(
    user_data: UserRegister,
    store: StoreBackend = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> RegisterResponse:
    """
    Register a new user.

    - **email**: Valid email address (unique, case-insensitive)
    - **password**: Must satisfy the password policy
    - **username**: Optional display name
    """
    policy = validate_password(
        user_data.password,
        min_length=config.PASSWORD_MIN_LENGTH,
        require_complexity=config.PASSWORD_REQUIRE_COMPLEXITY,
    )
    if not policy.is_valid:
        raise_bad_request("; ".join(policy.errors))

    try:
        await store.create_user(
            email=user_data.email,
            password=user_data.password,
            username=user_data.username,
        )
    except EmailAlreadyRegisteredError as e:
        raise_bad_request(e.message)

    return RegisterResponse(message="Account created successfully", redirect="/login")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login and start a session",
)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    store: StoreBackend = Depends(get_store),
    sessions: SessionService = Depends(get_session_service),
    limiter: AttemptLimiter = Depends(get_login_limiter),
) -> LoginResponse:
    """
    Authenticate with email and password.

    Sets the session cookie and also returns the token in the body.
    Repeated failures from one client address lock it out for a while.
    """
    client_ip = get_client_ip(request)
    try:
        limiter.ensure_allowed(client_ip)
    except RateLimitExceededError as e:
        raise_too_many_requests(e.retry_after, "Too many login attempts. Please try again later.")

    try:
        user = await store.authenticate_user(credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        limiter.record_failure(client_ip)
        logger.info(f"Failed login from {client_ip}")
        raise_bad_request(e.message)

    limiter.reset(client_ip)

    # Best-effort: a failed timestamp write never fails the login
    try:
        await store.update_last_login(user.id)
        user = await store.get_user_by_id(user.id) or user
    except Exception as e:
        logger.warning(f"Could not update last login for user {user.id}: {e}")

    session = sessions.create_session(user)
    sessions.set_auth_cookie(response, session.token)
    logger.info(f"User {user.id} logged in")

    return LoginResponse(user=session.user, token=session.token, message="Login successful")


@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
)
async def logout(
    response: Response,
    sessions: SessionService = Depends(get_session_service),
) -> Message:
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    revocation list.
    """
    sessions.clear_auth_cookie(response)
    return Message(message="Logged out successfully")


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Check the session cookie",
    responses={401: {"model": SessionResponse}},
)
async def get_session(
    token: str | None = Depends(get_session_token),
    sessions: SessionService = Depends(get_session_service),
):
    """Validate the cookie and return the identity carried by its claims."""
    result = sessions.verify_session(token)
    if not result.authenticated or result.user is None:
        return unauthenticated_response(sessions, result.error)
    return SessionResponse(authenticated=True, user=result.user.to_dict())


@router.get(
    "/verify",
    response_model=SessionResponse,
    summary="Verify the session against the store",
    responses={401: {"model": SessionResponse}},
)
async def verify(
    token: str | None = Depends(get_session_token),
    sessions: SessionService = Depends(get_session_service),
    store: StoreBackend = Depends(get_store),
):
    """Validate the cookie and load the current user record."""
    result = sessions.verify_session(token)
    if not result.authenticated or result.user is None:
        return unauthenticated_response(sessions, result.error)

    user = await store.get_user_by_id(result.user.id)
    if user is None:
        return unauthenticated_response(sessions, "User not found")

    return SessionResponse(
        authenticated=True,
        user=jsonable_encoder(user.model_dump(by_alias=True)),
    )


@router.get(
    "/me",
    summary="Current user with favorites",
)
async def me(
    current_user: UserPublic = Depends(get_current_user),
    store: StoreBackend = Depends(get_store),
) -> dict:
    """Get the current user, their favorites and a few account stats."""
    favorites = await store.get_user_favorites(current_user.id)
    return jsonable_encoder({
        "user": current_user.model_dump(by_alias=True),
        "favorites": [f.model_dump(by_alias=True) for f in favorites],
        "stats": {
            "favoritesCount": len(favorites),
            "memberSince": current_user.created_at,
        },
    })
