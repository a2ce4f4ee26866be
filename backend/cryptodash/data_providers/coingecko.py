"""
CoinGecko Client

Thin async HTTP client for the public CoinGecko v3 API.
No API key required; the free tier answers 429 when rate-limited.

Endpoints:
- /coins/markets - Bulk market snapshot ranked by market cap
- /coins/{id} - Coin details with market data
- /coins/{id}/market_chart - Historical prices for a lookback window
"""
from typing import Any, Optional

import httpx
from loguru import logger

from cryptodash.utils.exceptions import UpstreamStatusError


BASE_URL = "https://api.coingecko.com/api/v3"
USER_AGENT = "CryptoDash/1.0"

MARKETS_PAGE_SIZE = 250


class CoinGeckoClient:
    """
    Async client around a shared httpx.AsyncClient.

    Every call takes its own timeout. Non-2xx answers raise
    UpstreamStatusError; transport failures and timeouts surface as
    httpx.HTTPError; undecodable bodies as ValueError.
    """

    name = "coingecko"

    def __init__(
        self,
        base_url: str = BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Open the HTTP connection pool."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            )
            logger.info("CoinGecko client initialized")

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("CoinGecko client closed")

    async def _get(self, path: str, params: dict, timeout: float) -> Any:
        if self._client is None:
            await self.initialize()

        response = await self._client.get(path, params=params, timeout=timeout)
        if response.status_code != 200:
            raise UpstreamStatusError(response.status_code, provider=self.name)
        return response.json()

    async def fetch_markets(self, vs_currency: str, timeout: float) -> list:
        """
        Fetch the top coins by market cap with 1h/24h/7d change.

        Args:
            vs_currency: Quote currency (e.g. "eur")
            timeout: Seconds before the call is abandoned

        Returns:
            List of market entries as returned by CoinGecko
        """
        return await self._get(
            "/coins/markets",
            params={
                "vs_currency": vs_currency,
                "order": "market_cap_desc",
                "per_page": MARKETS_PAGE_SIZE,
                "page": 1,
                "price_change_percentage": "1h,24h,7d",
                "sparkline": "false",
            },
            timeout=timeout,
        )

    async def fetch_coin(self, coin_id: str, timeout: float) -> dict:
        """Fetch coin details (market data only, no tickers or community data)."""
        return await self._get(
            f"/coins/{coin_id}",
            params={
                "localization": "false",
                "tickers": "false",
                "market_data": "true",
                "community_data": "false",
                "developer_data": "false",
                "sparkline": "false",
            },
            timeout=timeout,
        )

    async def fetch_market_chart(
        self,
        coin_id: str,
        vs_currency: str,
        days: int,
        timeout: float,
    ) -> dict:
        """Fetch a price series; hourly points for a day or less, daily otherwise."""
        return await self._get(
            f"/coins/{coin_id}/market_chart",
            params={
                "vs_currency": vs_currency,
                "days": days,
                "interval": "hourly" if days <= 1 else "daily",
            },
            timeout=timeout,
        )
