"""
CryptoDash - Database Connection
"""
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base


# Base class for models
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def create_engine_and_sessionmaker(
    url: str,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create an async engine and its session factory.

    Args:
        url: Async database URL (postgresql+asyncpg:// or sqlite+aiosqlite://)
        echo: Log emitted SQL

    Returns:
        Tuple of (engine, session factory)
    """
    engine_kwargs = {"echo": echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        engine_kwargs.update(pool_size=10, max_overflow=20)

    engine = create_async_engine(url, **engine_kwargs)

    # Create async session factory
    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return engine, session_maker
