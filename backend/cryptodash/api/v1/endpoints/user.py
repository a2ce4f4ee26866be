"""
CryptoDash - User Endpoints
Profile, settings and password management
"""
from fastapi import APIRouter, Depends
from loguru import logger

from cryptodash.config import Settings
from cryptodash.core.password_policy import validate_password
from cryptodash.core.rate_limiter import AttemptLimiter
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.dependencies import (
    get_current_user,
    get_current_user_id,
    get_password_limiter,
    get_settings,
    get_store,
)
from cryptodash.schemas.user import (
    PasswordChange,
    SuccessMessage,
    UserProfileUpdate,
    UserPublic,
    UserSettingsUpdate,
)
from cryptodash.utils.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    RateLimitExceededError,
    UserNotFoundError,
    raise_bad_request,
    raise_conflict,
    raise_not_found,
    raise_too_many_requests,
)

router = APIRouter()


async def apply_updates(store: StoreBackend, user_id: str, updates: dict) -> UserPublic:
    """Run a partial update and map store errors to HTTP errors."""
    if not updates:
        raise_bad_request("No valid fields to update")

    try:
        return await store.update_user(user_id, updates)
    except EmailAlreadyRegisteredError as e:
        raise_conflict(e.message)
    except UserNotFoundError as e:
        raise_not_found(e.message)


@router.get("/profile", response_model=UserPublic)
async def get_profile(
    current_user: UserPublic = Depends(get_current_user),
) -> UserPublic:
    """Get the current user's profile."""
    return current_user


@router.put("/profile", response_model=UserPublic)
async def update_profile(
    data: UserProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
) -> UserPublic:
    """
    Update profile fields.

    Only username, email, phone, location, bio, company and website are
    accepted; anything else in the body is ignored.
    """
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    return await apply_updates(store, user_id, updates)


@router.put("/settings", response_model=UserPublic)
async def update_settings(
    data: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
) -> UserPublic:
    """
    Update preferences.

    Notification and privacy groups are merged with the stored values,
    so a partial group only changes the keys it carries.
    """
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    updates = {k: v for k, v in updates.items() if v != {}}
    return await apply_updates(store, user_id, updates)


@router.post("/password", response_model=SuccessMessage)
async def change_password(
    data: PasswordChange,
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
    limiter: AttemptLimiter = Depends(get_password_limiter),
    config: Settings = Depends(get_settings),
) -> SuccessMessage:
    """
    Change password.

    Requires the current password. Wrong current passwords count towards
    a per-user lockout.
    """
    try:
        limiter.ensure_allowed(user_id)
    except RateLimitExceededError as e:
        raise_too_many_requests(e.retry_after, "Too many password change attempts. Please try again later.")

    if data.new_password == data.current_password:
        raise_bad_request("New password must be different from the current password")

    policy = validate_password(
        data.new_password,
        min_length=config.PASSWORD_MIN_LENGTH,
        require_complexity=config.PASSWORD_REQUIRE_COMPLEXITY,
    )
    if not policy.is_valid:
        raise_bad_request("; ".join(policy.errors))

    try:
        await store.change_user_password(user_id, data.current_password, data.new_password)
    except InvalidCredentialsError as e:
        limiter.record_failure(user_id)
        logger.info(f"Wrong current password for user {user_id}")
        raise_bad_request(e.message)
    except UserNotFoundError as e:
        raise_not_found(e.message)

    limiter.reset(user_id)
    return SuccessMessage(success=True, message="Password updated successfully")
