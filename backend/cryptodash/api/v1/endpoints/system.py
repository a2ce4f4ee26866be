"""
CryptoDash - System Endpoints
Storage and cache diagnostics
"""
from fastapi import APIRouter, Depends

from cryptodash.config import Settings
from cryptodash.data_providers.market_data import MarketDataService
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.dependencies import get_market_data_service, get_settings, get_store

router = APIRouter()


@router.get("/database")
async def database_info(
    store: StoreBackend = Depends(get_store),
    config: Settings = Depends(get_settings),
    market_data: MarketDataService = Depends(get_market_data_service),
) -> dict:
    """Report which storage backend is active and what it holds, plus market cache stats."""
    info = await store.info()
    return {
        "status": "ok",
        "currentDatabase": store.name,
        "info": info,
        "environment": {
            "appEnv": config.APP_ENV,
            "serverless": config.SERVERLESS,
            "storageBackend": config.STORAGE_BACKEND or "auto",
            "databaseUrlConfigured": bool(config.DATABASE_URL),
        },
        "capabilities": {
            "persistent": info.get("persistent", False),
            "transactions": store.name == "sql",
            "migrations": store.name == "sql",
        },
        "marketDataCache": market_data.get_stats(),
    }
