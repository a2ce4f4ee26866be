"""
CryptoDash - Favorites Endpoints
Per-user list of pinned coins
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cryptodash.db.repositories.base import StoreBackend
from cryptodash.dependencies import get_current_user_id, get_store
from cryptodash.schemas.favorite import (
    Favorite,
    FavoriteAddResponse,
    FavoriteCreate,
    FavoriteRemoveResponse,
)
from cryptodash.utils.exceptions import (
    DuplicateFavoriteError,
    UserNotFoundError,
    raise_bad_request,
    raise_conflict,
    raise_not_found,
)

router = APIRouter()


@router.get("", response_model=list[Favorite])
async def list_favorites(
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
) -> list[Favorite]:
    """Get the current user's favorites, oldest first."""
    return await store.get_user_favorites(user_id)


@router.post("", response_model=FavoriteAddResponse)
async def add_favorite(
    data: FavoriteCreate,
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
) -> FavoriteAddResponse:
    """
    Add a coin to favorites.

    - **symbol**: Coin symbol or id (stored lowercase)
    - **name**: Display name
    """
    if not data.symbol.strip() or not data.name.strip():
        raise_bad_request("Symbol and name are required")

    try:
        favorite = await store.add_user_favorite(user_id, data.symbol, data.name)
    except DuplicateFavoriteError as e:
        raise_conflict(e.message)
    except UserNotFoundError as e:
        raise_not_found(e.message)

    return FavoriteAddResponse(success=True, favorite=favorite)


@router.delete("", response_model=FavoriteRemoveResponse)
async def remove_favorite(
    symbol: Optional[str] = Query(None, description="Symbol to remove (case-insensitive)"),
    user_id: str = Depends(get_current_user_id),
    store: StoreBackend = Depends(get_store),
) -> FavoriteRemoveResponse:
    """Remove a coin from favorites."""
    if not symbol or not symbol.strip():
        raise_bad_request("Symbol is required")

    removed = await store.remove_user_favorite(user_id, symbol)
    if not removed:
        raise_not_found("Favorite not found")

    return FavoriteRemoveResponse(success=True, removed=True)
