"""
CryptoDash - Database Facade
The single place where the persistence backend is chosen
"""
from loguru import logger

from cryptodash.config import Settings
from cryptodash.db.repositories import MemoryStore, SQLAlchemyStore, StoreBackend


def create_store(config: Settings) -> StoreBackend:
    """
    Build the store selected by configuration.

    STORAGE_BACKEND picks explicitly; when unset, serverless deployments
    without a DATABASE_URL fall back to memory and everything else uses SQL.

    Args:
        config: Application settings

    Returns:
        An uninitialized StoreBackend
    """
    backend = config.storage_backend
    if backend == "memory":
        logger.warning("Using in-memory storage: data will not survive a restart")
        return MemoryStore(bcrypt_rounds=config.BCRYPT_ROUNDS)

    return SQLAlchemyStore(
        config.database_url,
        echo=config.DEBUG and config.LOG_LEVEL == "DEBUG",
        bcrypt_rounds=config.BCRYPT_ROUNDS,
    )


__all__ = ["create_store", "StoreBackend"]
