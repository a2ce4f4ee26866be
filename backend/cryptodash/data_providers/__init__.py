"""
CryptoDash - Market Data Providers
"""
from cryptodash.data_providers.cache_manager import CacheConfig, ResponseCache
from cryptodash.data_providers.coingecko import CoinGeckoClient
from cryptodash.data_providers.market_data import MarketDataService

__all__ = ["CacheConfig", "ResponseCache", "CoinGeckoClient", "MarketDataService"]
