"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from currency_converter.api.dependencies import get_rate_cache
from currency_converter.api.routes import api_router
from currency_converter.cache import NullRateCache, RateCache, RedisRateCache
from currency_converter.config import AppSettings, get_settings
from currency_converter.core import errors
from currency_converter.core.errors import CacheError
from currency_converter.core.logging import request_logging_middleware, setup_logging
from currency_converter.core.telemetry import setup_telemetry
from currency_converter.providers import ExchangeRateAPIClient
from currency_converter.schemas import HealthResponse
from currency_converter.services import CurrencyConverter, RateResolver, RateSource

logger = logging.getLogger(__name__)

_SHUTDOWN_DRAIN_TIMEOUT = 5.0


async def _open_cache(settings: AppSettings) -> RateCache:
    try:
        return await RedisRateCache.connect(settings)
    except CacheError as exc:
        # The service keeps converting through the rate API alone.
        logger.error("Failed to connect to Redis at %s, caching disabled: %s", settings.redis_addr, exc)
        return NullRateCache()


def create_app(
    settings: AppSettings | None = None,
    *,
    cache: RateCache | None = None,
    rate_source: RateSource | None = None,
) -> FastAPI:
    """Build the application.

    ``cache`` and ``rate_source`` replace the Redis store and the
    ExchangeRate-API client; injected objects are not closed on shutdown.
    """

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        rate_cache = cache if cache is not None else await _open_cache(settings)
        api_client = ExchangeRateAPIClient.from_settings(settings) if rate_source is None else None
        resolver = RateResolver(
            rate_cache,
            rate_source if rate_source is not None else api_client,
            cache_write_timeout=settings.cache_write_timeout_seconds,
        )
        app.state.rate_cache = rate_cache
        app.state.resolver = resolver
        app.state.converter = CurrencyConverter(resolver)
        logger.info(
            "Application initialized",
            extra={
                "settings": settings.dict_for_logging(),
                "redis_connected": not isinstance(rate_cache, NullRateCache),
            },
        )
        try:
            yield
        finally:
            await resolver.drain(timeout=_SHUTDOWN_DRAIN_TIMEOUT)
            if api_client is not None:
                await api_client.aclose()
            if cache is None:
                await rate_cache.close()
            logger.info("Server stopped gracefully")

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )
    app.middleware("http")(request_logging_middleware)

    app.add_exception_handler(RequestValidationError, errors.request_validation_handler)
    app.add_exception_handler(errors.ValidationFailure, errors.validation_failure_handler)
    app.add_exception_handler(errors.OriginUnavailable, errors.origin_unavailable_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(rate_cache: RateCache = Depends(get_rate_cache)) -> HealthResponse:
        """Return service readiness metadata."""

        try:
            await rate_cache.health_check()
            cache_status = "ok"
        except CacheError as exc:
            logger.warning("Cache health check failed: %s", exc)
            cache_status = "unavailable"
        return HealthResponse(
            status="healthy",
            service=settings.service_name,
            version=settings.version,
            cache=cache_status,
        )

    return app


def build_app() -> FastAPI:
    """Entry point for ``uvicorn --factory``; configures logging and telemetry."""

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app = create_app(settings)
    setup_telemetry(app, settings)
    return app


__all__ = ["build_app", "create_app"]
