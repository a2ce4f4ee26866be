"""
CryptoDash - Store Backend Contract
CRUD contract over users and favorites shared by every persistence backend
"""
import asyncio
import secrets
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic.alias_generators import to_snake

from cryptodash.core.security import get_password_hash, verify_password
from cryptodash.schemas.favorite import Favorite
from cryptodash.schemas.user import UserPublic


# Fields a generic update may touch. Password changes have their own path.
UPDATABLE_FIELDS = frozenset({
    "username",
    "email",
    "phone",
    "location",
    "bio",
    "company",
    "website",
    "language",
    "timezone",
    "theme",
    "notifications",
    "privacy",
})

NESTED_FIELDS = frozenset({"notifications", "privacy"})


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().lower()


def generate_username() -> str:
    """Placeholder display name for users who registered without one."""
    return f"user{secrets.token_hex(4)}"


def prepare_updates(updates: dict[str, Any]) -> dict[str, Any]:
    """
    Filter a partial update down to the updatable fields.

    Keys may be camelCase or snake_case. Anything outside UPDATABLE_FIELDS
    (password, id, createdAt, unknown keys) is silently dropped, as are
    None values and blank usernames.
    """
    cleaned = {}
    for key, value in updates.items():
        field = to_snake(key)
        if field not in UPDATABLE_FIELDS or value is None:
            continue
        if field in NESTED_FIELDS:
            if not isinstance(value, dict):
                continue
            value = {to_snake(k): v for k, v in value.items() if v is not None}
        elif field == "email":
            value = normalize_email(value)
        elif field == "username":
            value = value.strip()
            if not value:
                continue
        cleaned[field] = value
    return cleaned


def merge_nested(current: Optional[dict], partial: dict) -> dict:
    """Merge a partial preference group into the stored one."""
    merged = dict(current or {})
    merged.update(partial)
    return merged


async def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash off the event loop; bcrypt is deliberately slow."""
    return await asyncio.to_thread(get_password_hash, password, rounds)


async def check_password(password: str, hashed: str) -> bool:
    return await asyncio.to_thread(verify_password, password, hashed)


class StoreBackend(ABC):
    """
    Persistence contract for users and favorites.

    Every returned user is a UserPublic, which has no password field.
    Writes are committed before the call returns.
    """

    name: str = "abstract"

    def __init__(self, bcrypt_rounds: Optional[int] = None):
        self.bcrypt_rounds = bcrypt_rounds

    # =========================
    # Lifecycle
    # =========================

    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def info(self) -> dict:
        """Backend name and a few counters for diagnostics."""

    # =========================
    # Users
    # =========================

    @abstractmethod
    async def create_user(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
    ) -> UserPublic:
        """
        Create a user.

        Raises:
            EmailAlreadyRegisteredError: If the normalized email is taken
        """

    @abstractmethod
    async def authenticate_user(self, email: str, password: str) -> UserPublic:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password (same error)
        """

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserPublic]:
        """Get a user, or None if absent."""

    @abstractmethod
    async def update_user(self, user_id: str, updates: dict[str, Any]) -> UserPublic:
        """
        Apply a partial update.

        Raises:
            UserNotFoundError: If the user does not exist
            EmailAlreadyRegisteredError: If the new email belongs to someone else
        """

    @abstractmethod
    async def change_user_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> UserPublic:
        """
        Replace the password after re-verifying the current one.

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidCredentialsError: If current_password is wrong
        """

    @abstractmethod
    async def update_last_login(self, user_id: str) -> None:
        """Stamp the user's last successful login."""

    # =========================
    # Favorites
    # =========================

    @abstractmethod
    async def get_user_favorites(self, user_id: str) -> list[Favorite]:
        """Favorites in the order they were added."""

    @abstractmethod
    async def add_user_favorite(self, user_id: str, symbol: str, name: str) -> Favorite:
        """
        Add a favorite; symbol is stored lowercase.

        Raises:
            DuplicateFavoriteError: If the user already has this symbol
            UserNotFoundError: If the user does not exist
        """

    @abstractmethod
    async def remove_user_favorite(self, user_id: str, symbol: str) -> bool:
        """Remove a favorite. Returns False if nothing matched."""
