"""
CryptoDash - API v1 Router
"""
from fastapi import APIRouter

from cryptodash.api.v1.endpoints import auth, crypto, favorites, system, user

api_router = APIRouter()


# API root endpoint
@api_router.get("/", tags=["API Info"])
async def api_root():
    """API root - returns version info."""
    return {
        "api": "CryptoDash",
        "version": "v1",
        "status": "operational"
    }


# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["Favorites"])
api_router.include_router(user.router, prefix="/user", tags=["User"])
api_router.include_router(crypto.router, prefix="/crypto", tags=["Crypto Markets"])
api_router.include_router(system.router, prefix="/system", tags=["System"])
