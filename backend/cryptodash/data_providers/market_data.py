"""
Market Data Service

Cached proxy in front of CoinGecko.

Lookup order for every request:
1. Fresh cache entry (younger than TTL) -> returned without an upstream call
2. Upstream fetch -> stored and returned
3. Upstream failure -> stale entry for the same key, if any
4. Nothing to fall back on -> UpstreamUnavailableError
"""
from functools import partial
from typing import Any, Awaitable, Callable, Literal

import httpx
from loguru import logger

from cryptodash.config import Settings
from cryptodash.data_providers.cache_manager import CacheConfig, ResponseCache
from cryptodash.data_providers.coingecko import MARKETS_PAGE_SIZE, CoinGeckoClient
from cryptodash.utils.exceptions import UpstreamStatusError, UpstreamUnavailableError


CoinDataKind = Literal["details", "chart"]


class MarketDataService:
    """Market listing and coin detail reads with stale-on-failure caching."""

    def __init__(
        self,
        client: CoinGeckoClient,
        list_cache: ResponseCache,
        detail_cache: ResponseCache,
        list_timeout: float = 15.0,
        detail_timeout: float = 12.0,
    ):
        self.client = client
        self.list_cache = list_cache
        self.detail_cache = detail_cache
        self.list_timeout = list_timeout
        self.detail_timeout = detail_timeout

    @classmethod
    def from_settings(cls, config: Settings, client: CoinGeckoClient) -> "MarketDataService":
        """Build the service and its two caches from configuration."""
        return cls(
            client=client,
            list_cache=ResponseCache(CacheConfig(
                ttl_seconds=config.MARKET_LIST_TTL_SECONDS,
                max_entries=config.MARKET_LIST_MAX_ENTRIES,
                name="markets",
            )),
            detail_cache=ResponseCache(CacheConfig(
                ttl_seconds=config.MARKET_DETAIL_TTL_SECONDS,
                max_entries=config.MARKET_DETAIL_MAX_ENTRIES,
                name="coin",
            )),
            list_timeout=config.MARKET_LIST_TIMEOUT_SECONDS,
            detail_timeout=config.MARKET_DETAIL_TIMEOUT_SECONDS,
        )

    @staticmethod
    def markets_key(vs_currency: str) -> str:
        return f"markets:{vs_currency.lower()}:{MARKETS_PAGE_SIZE}"

    @staticmethod
    def coin_key(kind: str, coin_id: str, vs_currency: str, days: int) -> str:
        return f"{kind}:{coin_id.lower()}:{vs_currency.lower()}:{days}"

    async def get_markets(self, vs_currency: str) -> Any:
        """
        Get the market listing for a currency.

        Raises:
            UpstreamUnavailableError: If the fetch fails and nothing is cached
        """
        vs_currency = vs_currency.lower()
        return await self._fetch_with_cache(
            self.list_cache,
            self.markets_key(vs_currency),
            partial(self.client.fetch_markets, vs_currency, timeout=self.list_timeout),
        )

    async def get_coin(
        self,
        coin_id: str,
        vs_currency: str,
        days: int = 7,
        kind: CoinDataKind = "details",
    ) -> Any:
        """
        Get coin details or its price chart.

        Args:
            coin_id: CoinGecko coin id (e.g. "bitcoin")
            vs_currency: Quote currency
            days: Lookback window for charts
            kind: "details" or "chart"

        Raises:
            UpstreamUnavailableError: If the fetch fails and nothing is cached
        """
        coin_id = coin_id.lower()
        vs_currency = vs_currency.lower()

        if kind == "chart":
            fetch = partial(
                self.client.fetch_market_chart,
                coin_id, vs_currency, days, timeout=self.detail_timeout,
            )
        else:
            fetch = partial(self.client.fetch_coin, coin_id, timeout=self.detail_timeout)

        return await self._fetch_with_cache(
            self.detail_cache,
            self.coin_key(kind, coin_id, vs_currency, days),
            fetch,
        )

    async def _fetch_with_cache(
        self,
        cache: ResponseCache,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        cached = cache.get_fresh(key)
        if cached is not None:
            return cached

        try:
            data = await fetch()
        except UpstreamStatusError as e:
            if e.is_rate_limited:
                logger.warning(f"CoinGecko rate limit hit for {key}")
            else:
                logger.error(f"CoinGecko error for {key}: {e.message}")
            return self._fallback(cache, key)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"CoinGecko request failed for {key}: {e!r}")
            return self._fallback(cache, key)

        cache.set(key, data)
        return data

    def _fallback(self, cache: ResponseCache, key: str) -> Any:
        stale = cache.get_stale(key)
        if stale is None:
            raise UpstreamUnavailableError()
        logger.info(f"Serving stale market data for {key}")
        return stale

    def get_stats(self) -> dict:
        return {
            "markets": self.list_cache.get_stats(),
            "coin": self.detail_cache.get_stats(),
        }
