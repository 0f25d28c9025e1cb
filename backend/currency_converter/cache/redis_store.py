"""Redis-backed exchange rate cache."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from currency_converter.config import AppSettings
from currency_converter.core.errors import CacheError, CacheMiss, CacheUnavailable

from .base import rate_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisRateCache:
    """Stores one rate per directional pair as a decimal string with a TTL."""

    def __init__(self, client: Redis, *, ttl_seconds: int, timeout: float = 2.0) -> None:
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RedisRateCache":
        client = Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
            socket_timeout=settings.redis_timeout_seconds,
            socket_connect_timeout=settings.redis_timeout_seconds,
        )
        return cls(
            client,
            ttl_seconds=settings.redis_ttl_seconds,
            timeout=settings.redis_timeout_seconds,
        )

    @classmethod
    async def connect(cls, settings: AppSettings) -> "RedisRateCache":
        """Build a cache from settings and verify the server answers PING."""

        cache = cls.from_settings(settings)
        try:
            await cache.health_check()
        except CacheUnavailable:
            await cache.close()
            raise
        logger.info("Connected to Redis at %s (db=%d)", settings.redis_addr, settings.redis_db)
        return cache

    async def _call(self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except (RedisError, asyncio.TimeoutError) as exc:
            reason = str(exc) or type(exc).__name__
            logger.error("Redis %s error for %s: %s", operation, key, reason)
            raise CacheUnavailable(f"redis {operation} failed: {reason}") from exc

    async def get(self, from_ccy: str, to_ccy: str) -> float:
        key = rate_key(from_ccy, to_ccy)
        raw: Any = await self._call("GET", key, self._client.get(key))
        if raw is None:
            raise CacheMiss(f"exchange rate not found for {from_ccy} to {to_ccy}")
        try:
            return float(raw)
        except (TypeError, ValueError) as exc:
            logger.error("Invalid cached rate under %s: %r", key, raw)
            raise CacheError(f"invalid exchange rate format: {raw!r}") from exc

    async def set(self, from_ccy: str, to_ccy: str, rate: float) -> None:
        key = rate_key(from_ccy, to_ccy)
        # repr() keeps the shortest string that round-trips to the same float
        await self._call("SET", key, self._client.set(key, repr(float(rate)), ex=self._ttl_seconds))
        logger.debug("Exchange rate saved to Redis", extra={"key": key, "rate": rate, "ttl": self._ttl_seconds})

    async def delete(self, from_ccy: str, to_ccy: str) -> None:
        key = rate_key(from_ccy, to_ccy)
        await self._call("DEL", key, self._client.delete(key))
        logger.debug("Exchange rate deleted from cache", extra={"key": key})

    async def health_check(self) -> None:
        await self._call("PING", "-", self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["RedisRateCache"]
