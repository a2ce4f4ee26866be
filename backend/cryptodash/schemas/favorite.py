"""
CryptoDash - Pydantic Schemas
Favorite Schemas
"""
from datetime import datetime

from pydantic import Field

from cryptodash.schemas.user import CamelModel


class FavoriteCreate(CamelModel):
    """Schema for adding a coin to favorites."""
    symbol: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)


class Favorite(CamelModel):
    """Schema for a stored favorite."""
    id: str
    user_id: str
    symbol: str
    name: str
    added_at: datetime


class FavoriteAddResponse(CamelModel):
    """Schema for a successful add."""
    success: bool = True
    favorite: Favorite


class FavoriteRemoveResponse(CamelModel):
    """Schema for a successful removal."""
    success: bool = True
    removed: bool = True
