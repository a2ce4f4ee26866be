"""
CryptoDash - Test Configuration
Shared fixtures and test configuration.
"""
import os
import sys
from typing import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["JWT_SECRET"] = "test-jwt-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FILE"] = ""
os.environ["STORAGE_BACKEND"] = "memory"

from fastapi.testclient import TestClient  # noqa: E402

from cryptodash.config import Settings  # noqa: E402
from cryptodash.data_providers.cache_manager import CacheConfig, ResponseCache  # noqa: E402
from cryptodash.data_providers.coingecko import CoinGeckoClient  # noqa: E402
from cryptodash.data_providers.market_data import MarketDataService  # noqa: E402
from cryptodash.db.repositories.memory import MemoryStore  # noqa: E402
from cryptodash.db.repositories.sql import SQLAlchemyStore  # noqa: E402
from cryptodash.main import create_application  # noqa: E402


TEST_PASSWORD = "Passw0rd!"


# =========================
# Clock & Settings Fixtures
# =========================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        APP_ENV="testing",
        JWT_SECRET="test-jwt-secret-key",
        BCRYPT_ROUNDS=4,
        LOG_FILE="",
        STORAGE_BACKEND="memory",
    )


# =========================
# Store Fixtures
# =========================

@pytest_asyncio.fixture
async def memory_store() -> AsyncGenerator[MemoryStore, None]:
    store = MemoryStore(bcrypt_rounds=4)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path) -> AsyncGenerator[SQLAlchemyStore, None]:
    store = SQLAlchemyStore(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", bcrypt_rounds=4)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Every store backend, for contract tests."""
    if request.param == "memory":
        backend = MemoryStore(bcrypt_rounds=4)
    else:
        backend = SQLAlchemyStore(f"sqlite+aiosqlite:///{tmp_path / 'contract.db'}", bcrypt_rounds=4)
    await backend.initialize()
    yield backend
    await backend.close()


# =========================
# Upstream Fixtures
# =========================

class FakeCoinGecko:
    """
    Stand-in for the CoinGecko API behind an httpx.MockTransport.

    By default every answer is 200 with a payload that changes on each
    call, so a cached response can be told apart from a fresh one.
    """

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.status_code = 200
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "upstream error"})

        call = len(self.calls)
        path = request.url.path
        if path.endswith("/coins/markets"):
            return httpx.Response(200, json=[
                {"id": "bitcoin", "symbol": "btc", "current_price": 50000 + call},
                {"id": "ethereum", "symbol": "eth", "current_price": 3000 + call},
            ])
        if path.endswith("/market_chart"):
            return httpx.Response(200, json={"prices": [[1700000000000, 100.0 + call]]})
        coin_id = path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"id": coin_id, "market_data": {"call": call}})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_coingecko() -> FakeCoinGecko:
    return FakeCoinGecko()


@pytest.fixture
def market_data(fake_coingecko, clock) -> MarketDataService:
    client = CoinGeckoClient(base_url="https://coingecko.test/api/v3", transport=fake_coingecko.transport)
    return MarketDataService(
        client=client,
        list_cache=ResponseCache(CacheConfig(ttl_seconds=300, max_entries=20, name="markets"), clock=clock),
        detail_cache=ResponseCache(CacheConfig(ttl_seconds=600, max_entries=50, name="coin"), clock=clock),
        list_timeout=15.0,
        detail_timeout=12.0,
    )


# =========================
# Application Fixtures
# =========================

@pytest.fixture
def app(test_settings, market_data, clock):
    return create_application(
        config=test_settings,
        store=MemoryStore(bcrypt_rounds=4),
        market_data=market_data,
        clock=clock,
    )


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered_user(client) -> dict:
    """Credentials of a user registered through the API."""
    credentials = {"email": "alice@example.com", "password": TEST_PASSWORD, "username": "alice"}
    response = client.post("/api/auth/register", json=credentials)
    assert response.status_code == 200
    return credentials


@pytest.fixture
def auth_client(client, registered_user) -> TestClient:
    """Client holding a valid session cookie."""
    response = client.post(
        "/api/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert response.status_code == 200
    return client
