"""
CryptoDash - Crypto Market Endpoints
Cached proxy for CoinGecko market listings and coin details
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query

from cryptodash.config import Settings
from cryptodash.data_providers.market_data import MarketDataService
from cryptodash.dependencies import get_market_data_service, get_settings
from cryptodash.utils.exceptions import UpstreamUnavailableError, raise_service_unavailable

router = APIRouter()

CURRENCY_PATTERN = r"^[A-Za-z]{2,10}$"
COIN_ID_PATTERN = r"^[A-Za-z0-9._-]{1,100}$"


@router.get("")
async def list_markets(
    vs_currency: Optional[str] = Query(None, pattern=CURRENCY_PATTERN, description="Quote currency"),
    market_data: MarketDataService = Depends(get_market_data_service),
    config: Settings = Depends(get_settings),
):
    """
    Get the top 250 coins by market cap.

    Served from cache for a few minutes; if CoinGecko fails the last
    known listing is returned instead.
    """
    try:
        return await market_data.get_markets(vs_currency or config.DEFAULT_VS_CURRENCY)
    except UpstreamUnavailableError as e:
        raise_service_unavailable(e.message)


@router.get("/{coin_id}")
async def get_coin(
    coin_id: str = Path(..., pattern=COIN_ID_PATTERN),
    vs_currency: Optional[str] = Query(None, pattern=CURRENCY_PATTERN),
    days: int = Query(7, ge=1, le=3650, description="Lookback window for charts"),
    kind: Literal["details", "chart"] = Query("details", alias="type"),
    market_data: MarketDataService = Depends(get_market_data_service),
    config: Settings = Depends(get_settings),
):
    """
    Get coin details or its price chart.

    - **type=details**: Coin metadata and market data
    - **type=chart**: Price series (hourly for 1 day, daily otherwise)
    """
    try:
        return await market_data.get_coin(
            coin_id,
            vs_currency or config.DEFAULT_VS_CURRENCY,
            days=days,
            kind=kind,
        )
    except UpstreamUnavailableError as e:
        raise_service_unavailable(e.message)
