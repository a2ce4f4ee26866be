"""
CryptoDash - Configuration Settings
"""
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
import json


DEFAULT_JWT_SECRET = "your-super-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # =========================
    # Application Settings
    # =========================
    APP_NAME: str = "CryptoDash"
    APP_ENV: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # =========================
    # Server Configuration
    # =========================
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    # =========================
    # Storage
    # =========================
    # "sql" or "memory"; empty means pick from SERVERLESS / DATABASE_URL
    STORAGE_BACKEND: str = ""
    # Set on serverless platforms where the local filesystem is not durable
    SERVERLESS: bool = False
    DATABASE_URL: str = ""
    SQLITE_PATH: str = "./data/cryptodash.db"

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("", "sql", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'sql' or 'memory'")
        return v

    @property
    def storage_backend(self) -> str:
        """Resolve which persistence backend to use."""
        if self.STORAGE_BACKEND:
            return self.STORAGE_BACKEND
        if self.SERVERLESS and not self.DATABASE_URL:
            return "memory"
        return "sql"

    @property
    def database_url(self) -> str:
        """Get the async database URL."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Ensure it uses asyncpg driver
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+asyncpg://", 1)
            return url
        return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"

    @property
    def database_url_sync(self) -> str:
        """Get the sync database URL for Alembic."""
        url = self.database_url
        if "+asyncpg" in url:
            return url.replace("postgresql+asyncpg://", "postgresql://", 1)
        if "+aiosqlite" in url:
            return url.replace("sqlite+aiosqlite://", "sqlite://", 1)
        return url

    # =========================
    # JWT Authentication
    # =========================
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "my-crypto"
    JWT_AUDIENCE: str = "crypto-users"
    SESSION_EXPIRE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "auth-token"

    # =========================
    # Passwords
    # =========================
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_REQUIRE_COMPLEXITY: bool = True

    # =========================
    # Rate Limit Settings
    # =========================
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_WINDOW_SECONDS: int = 15 * 60
    PASSWORD_CHANGE_MAX_ATTEMPTS: int = 3
    PASSWORD_CHANGE_WINDOW_SECONDS: int = 15 * 60

    # =========================
    # Market Data (CoinGecko)
    # =========================
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    DEFAULT_VS_CURRENCY: str = "eur"
    MARKET_LIST_TTL_SECONDS: int = 300
    MARKET_LIST_MAX_ENTRIES: int = 20
    MARKET_LIST_TIMEOUT_SECONDS: float = 15.0
    MARKET_DETAIL_TTL_SECONDS: int = 600
    MARKET_DETAIL_MAX_ENTRIES: int = 50
    MARKET_DETAIL_TIMEOUT_SECONDS: float = 12.0

    # =========================
    # Logging
    # =========================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def uses_default_jwt_secret(self) -> bool:
        return self.JWT_SECRET == DEFAULT_JWT_SECRET

    @model_validator(mode="after")
    def check_production_secret(self) -> "Settings":
        if self.is_production and self.uses_default_jwt_secret:
            raise ValueError("JWT_SECRET must be set to a non-default value in production")
        return self


# Create global settings instance
settings = Settings()
