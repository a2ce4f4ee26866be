"""
Unit Tests - Market Data Service
CoinGecko is replaced by an httpx.MockTransport; time by an injected clock.
"""
import httpx
import pytest

from cryptodash.data_providers.coingecko import CoinGeckoClient
from cryptodash.utils.exceptions import UpstreamStatusError, UpstreamUnavailableError


class TestMarketListing:
    """Tests for get_markets."""

    @pytest.mark.asyncio
    async def test_fetch_and_cache(self, market_data, fake_coingecko):
        first = await market_data.get_markets("eur")
        second = await market_data.get_markets("eur")
        assert first == second
        assert len(fake_coingecko.calls) == 1

    @pytest.mark.asyncio
    async def test_request_parameters(self, market_data, fake_coingecko):
        await market_data.get_markets("EUR")
        params = fake_coingecko.calls[0].url.params
        assert fake_coingecko.calls[0].url.path == "/api/v3/coins/markets"
        assert params["vs_currency"] == "eur"
        assert params["per_page"] == "250"
        assert params["order"] == "market_cap_desc"
        assert params["price_change_percentage"] == "1h,24h,7d"

    @pytest.mark.asyncio
    async def test_refetch_after_ttl(self, market_data, fake_coingecko, clock):
        first = await market_data.get_markets("eur")
        clock.advance(299)
        assert await market_data.get_markets("eur") == first
        clock.advance(1)
        refreshed = await market_data.get_markets("eur")
        assert refreshed != first
        assert len(fake_coingecko.calls) == 2

    @pytest.mark.asyncio
    async def test_currencies_cached_separately(self, market_data, fake_coingecko):
        await market_data.get_markets("eur")
        await market_data.get_markets("usd")
        assert len(fake_coingecko.calls) == 2

    @pytest.mark.asyncio
    async def test_stale_on_rate_limit(self, market_data, fake_coingecko, clock):
        first = await market_data.get_markets("eur")
        clock.advance(301)
        fake_coingecko.status_code = 429
        assert await market_data.get_markets("eur") == first
        assert len(fake_coingecko.calls) == 2

    @pytest.mark.asyncio
    async def test_stale_on_server_error(self, market_data, fake_coingecko, clock):
        first = await market_data.get_markets("eur")
        clock.advance(301)
        fake_coingecko.status_code = 500
        assert await market_data.get_markets("eur") == first

    @pytest.mark.asyncio
    async def test_stale_on_network_error(self, market_data, fake_coingecko, clock):
        first = await market_data.get_markets("eur")
        clock.advance(301)
        fake_coingecko.error = httpx.ConnectError("connection refused")
        assert await market_data.get_markets("eur") == first

    @pytest.mark.asyncio
    async def test_stale_on_timeout(self, market_data, fake_coingecko, clock):
        first = await market_data.get_markets("eur")
        clock.advance(301)
        fake_coingecko.error = httpx.ReadTimeout("timed out")
        assert await market_data.get_markets("eur") == first

    @pytest.mark.asyncio
    async def test_unavailable_without_cache(self, market_data, fake_coingecko):
        fake_coingecko.status_code = 429
        with pytest.raises(UpstreamUnavailableError):
            await market_data.get_markets("eur")

    @pytest.mark.asyncio
    async def test_other_currency_is_not_a_fallback(self, market_data, fake_coingecko):
        await market_data.get_markets("eur")
        fake_coingecko.error = httpx.ConnectError("down")
        with pytest.raises(UpstreamUnavailableError):
            await market_data.get_markets("usd")

    @pytest.mark.asyncio
    async def test_undecodable_body(self, market_data, clock):
        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")

        market_data.client = CoinGeckoClient(
            base_url="https://coingecko.test/api/v3", transport=httpx.MockTransport(handler)
        )
        with pytest.raises(UpstreamUnavailableError):
            await market_data.get_markets("eur")


class TestCoinDetail:
    """Tests for get_coin."""

    @pytest.mark.asyncio
    async def test_details(self, market_data, fake_coingecko):
        data = await market_data.get_coin("bitcoin", "eur")
        assert data["id"] == "bitcoin"
        request = fake_coingecko.calls[0]
        assert request.url.path == "/api/v3/coins/bitcoin"
        assert request.url.params["tickers"] == "false"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("days, interval", [(1, "hourly"), (7, "daily"), (30, "daily")])
    async def test_chart_interval(self, market_data, fake_coingecko, days, interval):
        await market_data.get_coin("bitcoin", "usd", days=days, kind="chart")
        request = fake_coingecko.calls[0]
        assert request.url.path == "/api/v3/coins/bitcoin/market_chart"
        assert request.url.params["interval"] == interval
        assert request.url.params["days"] == str(days)
        assert request.url.params["vs_currency"] == "usd"

    @pytest.mark.asyncio
    async def test_kinds_cached_separately(self, market_data, fake_coingecko):
        await market_data.get_coin("bitcoin", "eur", days=7, kind="details")
        await market_data.get_coin("bitcoin", "eur", days=7, kind="chart")
        await market_data.get_coin("bitcoin", "eur", days=30, kind="chart")
        await market_data.get_coin("bitcoin", "eur", days=30, kind="chart")
        assert len(fake_coingecko.calls) == 3

    @pytest.mark.asyncio
    async def test_detail_ttl_is_ten_minutes(self, market_data, fake_coingecko, clock):
        await market_data.get_coin("bitcoin", "eur")
        clock.advance(599)
        await market_data.get_coin("bitcoin", "eur")
        assert len(fake_coingecko.calls) == 1
        clock.advance(1)
        await market_data.get_coin("bitcoin", "eur")
        assert len(fake_coingecko.calls) == 2

    @pytest.mark.asyncio
    async def test_stale_on_failure(self, market_data, fake_coingecko, clock):
        first = await market_data.get_coin("bitcoin", "eur", days=7, kind="chart")
        clock.advance(601)
        fake_coingecko.status_code = 503
        assert await market_data.get_coin("bitcoin", "eur", days=7, kind="chart") == first

    @pytest.mark.asyncio
    async def test_eviction_ceiling(self, market_data):
        market_data.detail_cache.config.max_entries = 2
        for coin in ("bitcoin", "ethereum", "solana"):
            await market_data.get_coin(coin, "eur")
        assert len(market_data.detail_cache) == 2
        assert market_data.coin_key("details", "bitcoin", "eur", 7) not in market_data.detail_cache


class TestCacheStats:
    """Tests for the per-cache counters."""

    @pytest.mark.asyncio
    async def test_counts_hits_misses_and_stale(self, market_data, fake_coingecko, clock):
        await market_data.get_markets("eur")
        await market_data.get_markets("eur")
        clock.advance(301)
        fake_coingecko.status_code = 429
        await market_data.get_markets("eur")
        fake_coingecko.status_code = 200
        await market_data.get_coin("bitcoin", "eur")

        stats = market_data.get_stats()
        assert stats["markets"]["hits"] == 1
        assert stats["markets"]["misses"] == 2
        assert stats["markets"]["stale_hits"] == 1
        assert stats["markets"]["sets"] == 1
        assert stats["markets"]["size"] == 1
        assert stats["coin"]["misses"] == 1
        assert stats["coin"]["sets"] == 1
        assert stats["coin"]["max_entries"] == 50


class TestCoinGeckoClient:
    """Tests for the raw client."""

    @pytest.mark.asyncio
    async def test_non_200_raises_status_error(self):
        client = CoinGeckoClient(
            base_url="https://coingecko.test/api/v3",
            transport=httpx.MockTransport(lambda request: httpx.Response(429)),
        )
        with pytest.raises(UpstreamStatusError) as exc_info:
            await client.fetch_markets("eur", timeout=1.0)
        assert exc_info.value.is_rate_limited is True
        await client.close()

    @pytest.mark.asyncio
    async def test_sends_accept_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        client = CoinGeckoClient(base_url="https://coingecko.test/api/v3", transport=httpx.MockTransport(handler))
        await client.initialize()
        await client.fetch_markets("eur", timeout=1.0)
        await client.close()
        assert seen[0].headers["accept"] == "application/json"
