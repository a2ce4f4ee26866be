"""
CryptoDash - Store Backends
"""
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.db.repositories.memory import MemoryStore
from cryptodash.db.repositories.sql import SQLAlchemyStore

__all__ = ["StoreBackend", "MemoryStore", "SQLAlchemyStore"]
