"""
CryptoDash - SQL Store
SQLAlchemy async backend (PostgreSQL via asyncpg, SQLite via aiosqlite)
"""
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError

from cryptodash.db.database import Base, create_engine_and_sessionmaker, utcnow
from cryptodash.db.models import Favorite as FavoriteModel
from cryptodash.db.models import User
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


class SQLAlchemyStore(StoreBackend):
    """Relational backend. Uniqueness is enforced by the schema."""

    name = "sql"

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        bcrypt_rounds: Optional[int] = None,
    ):
        super().__init__(bcrypt_rounds)
        self.database_url = database_url
        self.engine, self.session_maker = create_engine_and_sessionmaker(
            database_url, echo=echo
        )

    async def initialize(self) -> None:
        """Create tables if they do not exist."""
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database tables created/verified ({url.get_backend_name()})")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")

    async def info(self) -> dict:
        async with self.session_maker() as session:
            users = await session.scalar(select(func.count()).select_from(User))
            favorites = await session.scalar(select(func.count()).select_from(FavoriteModel))
        return {
            "backend": self.name,
            "persistent": True,
            "dialect": self.engine.dialect.name,
            "url": make_url(self.database_url).render_as_string(hide_password=True),
            "users": users or 0,
            "favorites": favorites or 0,
        }

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
        async with self.session_maker() as session:
            existing = await session.scalar(select(User.id).where(User.email == email))
            if existing is not None:
                raise EmailAlreadyRegisteredError()

            user = User(
                email=email,
                username=(username or "").strip() or generate_username(),
                hashed_password=await hash_password(password, self.bcrypt_rounds),
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise EmailAlreadyRegisteredError() from e
            await session.refresh(user)
            logger.info(f"User created: {user.id}")
            return UserPublic.model_validate(user)

    async def authenticate_user(self, email: str, password: str) -> UserPublic:
        async with self.session_maker() as session:
            user = await session.scalar(
                select(User).where(User.email == normalize_email(email))
            )
        if user is None:
            raise InvalidCredentialsError()

        if not await check_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return UserPublic.model_validate(user)

    async def get_user_by_id(self, user_id: str) -> Optional[UserPublic]:
        async with self.session_maker() as session:
            user = await session.get(User, user_id)
        return UserPublic.model_validate(user) if user else None

    async def update_user(self, user_id: str, updates: dict[str, Any]) -> UserPublic:
        changes = prepare_updates(updates)
        async with self.session_maker() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise UserNotFoundError()

            new_email = changes.get("email")
            if new_email and new_email != user.email:
                owner = await session.scalar(select(User.id).where(User.email == new_email))
                if owner is not None and owner != user_id:
                    raise EmailAlreadyRegisteredError()

            for field, value in changes.items():
                if field in ("notifications", "privacy"):
                    # Assign a new dict so the JSON column is marked dirty
                    value = merge_nested(getattr(user, field), value)
                setattr(user, field, value)

            user.updated_at = utcnow()
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise EmailAlreadyRegisteredError() from e
            await session.refresh(user)
            return UserPublic.model_validate(user)

    async def change_user_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> UserPublic:
        async with self.session_maker() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise UserNotFoundError()

            if not await check_password(current_password, user.hashed_password):
                raise InvalidCredentialsError("Current password is incorrect")

            now = utcnow()
            user.hashed_password = await hash_password(new_password, self.bcrypt_rounds)
            user.password_changed_at = now
            user.updated_at = now
            await session.commit()
            await session.refresh(user)
            logger.info(f"Password changed for user {user_id}")
            return UserPublic.model_validate(user)

    async def update_last_login(self, user_id: str) -> None:
        async with self.session_maker() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise UserNotFoundError()
            user.last_login = utcnow()
            await session.commit()

    # =========================
    # Favorites
    # =========================

    async def get_user_favorites(self, user_id: str) -> list[Favorite]:
        async with self.session_maker() as session:
            result = await session.scalars(
                select(FavoriteModel)
                .where(FavoriteModel.user_id == user_id)
                .order_by(FavoriteModel.added_at, FavoriteModel.id)
            )
            return [Favorite.model_validate(f) for f in result.all()]

    async def add_user_favorite(self, user_id: str, symbol: str, name: str) -> Favorite:
        symbol = normalize_symbol(symbol)
        async with self.session_maker() as session:
            if await session.get(User, user_id) is None:
                raise UserNotFoundError()

            existing = await session.scalar(
                select(FavoriteModel.id).where(
                    FavoriteModel.user_id == user_id,
                    FavoriteModel.symbol == symbol,
                )
            )
            if existing is not None:
                raise DuplicateFavoriteError(symbol)

            favorite = FavoriteModel(user_id=user_id, symbol=symbol, name=name.strip())
            session.add(favorite)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateFavoriteError(symbol) from e
            await session.refresh(favorite)
            return Favorite.model_validate(favorite)

    async def remove_user_favorite(self, user_id: str, symbol: str) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(
                delete(FavoriteModel).where(
                    FavoriteModel.user_id == user_id,
                    FavoriteModel.symbol == normalize_symbol(symbol),
                )
            )
            await session.commit()
            return result.rowcount > 0
