"""
CryptoDash - Database Models
"""
from cryptodash.db.models.user import User
from cryptodash.db.models.favorite import Favorite

__all__ = [
    "User",
    "Favorite",
]
