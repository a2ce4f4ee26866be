"""
CryptoDash - In-Memory Store
Process-local backend for tests and ephemeral (serverless) deployments
"""
import copy
import uuid
from typing import Any, Optional

from loguru import logger

from cryptodash.db.database import utcnow
from cryptodash.db.models.user import default_notifications, default_privacy
from cryptodash.db.repositories.base import (
    StoreBackend,
    check_password,
    generate_username,
    hash_password,
    merge_nested,
    normalize_email,
    normalize_symbol,
    prepare_updates,
)
from cryptodash.schemas.favorite import Favorite
from cryptodash.schemas.user import UserPublic
from cryptodash.utils.exceptions import (
    DuplicateFavoriteError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
)


class MemoryStore(StoreBackend):
    """
    Dict-backed store. Data is lost when the process exits.

    Each check-then-write runs without an await in between, so concurrent
    tasks on the same event loop cannot interleave inside it.
    """

    name = "memory"

    def __init__(self, bcrypt_rounds: Optional[int] = None):
        super().__init__(bcrypt_rounds)
        self._users: dict[str, dict] = {}
        self._ids_by_email: dict[str, str] = {}
        self._favorites: dict[str, list[dict]] = {}

    async def info(self) -> dict:
        return {
            "backend": self.name,
            "persistent": False,
            "users": len(self._users),
            "favorites": sum(len(f) for f in self._favorites.values()),
        }

    async def close(self) -> None:
        self._users.clear()
        self._ids_by_email.clear()
        self._favorites.clear()

    def _to_public(self, record: dict) -> UserPublic:
        return UserPublic.model_validate(copy.deepcopy(record))

    def _get_record(self, user_id: str) -> dict:
        record = self._users.get(user_id)
        if record is None:
            raise UserNotFoundError()
        return record

    # =========================
    # Users
    # =========================

    async def create_user(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
    ) -> UserPublic:
        email = normalize_email(email)
        if email in self._ids_by_email:
            raise EmailAlreadyRegisteredError()

        hashed = await hash_password(password, self.bcrypt_rounds)

        # Re-check after the hashing suspension point
        if email in self._ids_by_email:
            raise EmailAlreadyRegisteredError()

        now = utcnow()
        record = {
            "id": uuid.uuid4().hex,
            "email": email,
            "username": (username or "").strip() or generate_username(),
            "hashed_password": hashed,
            "phone": "",
            "location": "",
            "bio": "",
            "company": "",
            "website": "",
            "language": "fr",
            "timezone": "UTC",
            "theme": "dark",
            "notifications": default_notifications(),
            "privacy": default_privacy(),
            "created_at": now,
            "updated_at": now,
            "last_login": None,
            "password_changed_at": None,
        }
        self._users[record["id"]] = record
        self._ids_by_email[email] = record["id"]
        logger.info(f"User created: {record['id']}")
        return self._to_public(record)

    async def authenticate_user(self, email: str, password: str) -> UserPublic:
        user_id = self._ids_by_email.get(normalize_email(email))
        record = self._users.get(user_id) if user_id else None
        if record is None:
            raise InvalidCredentialsError()

        if not await check_password(password, record["hashed_password"]):
            raise InvalidCredentialsError()
        return self._to_public(record)

    async def get_user_by_id(self, user_id: str) -> Optional[UserPublic]:
        record = self._users.get(user_id)
        return self._to_public(record) if record else None

    async def update_user(self, user_id: str, updates: dict[str, Any]) -> UserPublic:
        record = self._get_record(user_id)
        changes = prepare_updates(updates)

        new_email = changes.get("email")
        if new_email and new_email != record["email"]:
            owner = self._ids_by_email.get(new_email)
            if owner is not None and owner != user_id:
                raise EmailAlreadyRegisteredError()
            del self._ids_by_email[record["email"]]
            self._ids_by_email[new_email] = user_id

        for field, value in changes.items():
            if field in ("notifications", "privacy"):
                value = merge_nested(record[field], value)
            record[field] = value

        record["updated_at"] = utcnow()
        return self._to_public(record)

    async def change_user_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> UserPublic:
        record = self._get_record(user_id)
        if not await check_password(current_password, record["hashed_password"]):
            raise InvalidCredentialsError("Current password is incorrect")

        hashed = await hash_password(new_password, self.bcrypt_rounds)
        record = self._get_record(user_id)
        now = utcnow()
        record["hashed_password"] = hashed
        record["password_changed_at"] = now
        record["updated_at"] = now
        logger.info(f"Password changed for user {user_id}")
        return self._to_public(record)

    async def update_last_login(self, user_id: str) -> None:
        record = self._get_record(user_id)
        record["last_login"] = utcnow()

    # =========================
    # Favorites
    # =========================

    async def get_user_favorites(self, user_id: str) -> list[Favorite]:
        return [Favorite.model_validate(f) for f in self._favorites.get(user_id, [])]

    async def add_user_favorite(self, user_id: str, symbol: str, name: str) -> Favorite:
        self._get_record(user_id)
        symbol = normalize_symbol(symbol)
        favorites = self._favorites.setdefault(user_id, [])
        if any(f["symbol"] == symbol for f in favorites):
            raise DuplicateFavoriteError(symbol)

        favorite = {
            "id": uuid.uuid4().hex,
            "user_id": user_id,
            "symbol": symbol,
            "name": name.strip(),
            "added_at": utcnow(),
        }
        favorites.append(favorite)
        return Favorite.model_validate(favorite)

    async def remove_user_favorite(self, user_id: str, symbol: str) -> bool:
        symbol = normalize_symbol(symbol)
        favorites = self._favorites.get(user_id, [])
        remaining = [f for f in favorites if f["symbol"] != symbol]
        if len(remaining) == len(favorites):
            return False
        self._favorites[user_id] = remaining
        return True
