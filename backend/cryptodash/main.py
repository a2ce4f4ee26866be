"""
CryptoDash - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from cryptodash.api.v1.router import api_router
from cryptodash.config import Settings, settings
from cryptodash.core.rate_limiter import AttemptLimiter
from cryptodash.core.session import SessionService
from cryptodash.data_providers.coingecko import CoinGeckoClient
from cryptodash.data_providers.market_data import MarketDataService
from cryptodash.db import create_store
from cryptodash.db.repositories.base import StoreBackend
from cryptodash.utils.logger import setup_logging


APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events handler."""
    config: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {config.APP_NAME} ({config.APP_ENV})...")
    if config.uses_default_jwt_secret:
        logger.warning("JWT_SECRET is the documented default; set a real secret outside development")

    await app.state.store.initialize()
    logger.info(f"Storage initialized ({app.state.store.name})")

    await app.state.market_data.client.initialize()

    logger.info(f"{config.APP_NAME} started successfully")

    yield

    # Shutdown
    logger.info(f"Shutting down {config.APP_NAME}...")
    await app.state.market_data.client.close()
    await app.state.store.close()
    logger.info("Goodbye")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 with a short message."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.debug(f"Validation error on {request.url.path}: {len(errors)} error(s)")

    detail = "Invalid request"
    if errors:
        first = errors[0]
        detail = f"{first['field']}: {first['message']}" if first["field"] else first["message"]

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail, "errors": errors},
    )


def create_application(
    config: Optional[Settings] = None,
    store: Optional[StoreBackend] = None,
    market_data: Optional[MarketDataService] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Shared state (store, session service, limiters, market data) is built
    here and kept on app.state so tests can pass their own.

    Args:
        config: Settings (defaults to the global settings)
        store: Persistence backend (defaults to create_store(config))
        market_data: Market data service (defaults to a CoinGecko-backed one)
        clock: Monotonic clock for the attempt limiters
    """
    config = config or settings
    setup_logging(config)

    app = FastAPI(
        title=config.APP_NAME,
        description="Personal cryptocurrency dashboard API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.store = store or create_store(config)
    app.state.session_service = SessionService(config)
    app.state.login_limiter = AttemptLimiter(
        config.LOGIN_MAX_ATTEMPTS,
        config.LOGIN_WINDOW_SECONDS,
        clock=clock,
        name="login",
    )
    app.state.password_limiter = AttemptLimiter(
        config.PASSWORD_CHANGE_MAX_ATTEMPTS,
        config.PASSWORD_CHANGE_WINDOW_SECONDS,
        clock=clock,
        name="password-change",
    )
    app.state.market_data = market_data or MarketDataService.from_settings(
        config, CoinGeckoClient(base_url=config.COINGECKO_BASE_URL)
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include API router
    app.include_router(api_router, prefix=config.API_PREFIX)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "app": config.APP_NAME,
            "version": APP_VERSION
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cryptodash.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
