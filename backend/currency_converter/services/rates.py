"""Cache-aside exchange rate resolution.

Lookup order for a pair ``(FROM, TO)``:

1. identical codes resolve to ``1.0`` without touching any collaborator;
2. the cache store (``rate:FROM:TO``); any cache failure falls through;
3. the upstream rate API, whose failures are fatal.

After an origin fetch the rate is written back to the cache in a detached
task with its own deadline. The caller never waits for that write, and two
concurrent misses for the same pair may both reach the origin.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from currency_converter.cache import RateCache
from currency_converter.core.errors import (
    CacheError,
    CacheMiss,
    InvalidCurrencyCode,
    OriginError,
    OriginUnavailable,
)

logger = logging.getLogger(__name__)

CURRENCY_CODE_LENGTH = 3
DEFAULT_CACHE_WRITE_TIMEOUT = 2.0


class RateSource(Protocol):
    async def fetch_rate(self, from_ccy: str, to_ccy: str) -> float: ...


def normalize_currency(code: str | None, field: str) -> str:
    """Validate a currency code and return it upper-cased."""

    if not code:
        raise InvalidCurrencyCode(field, "currency codes cannot be empty")
    if len(code) != CURRENCY_CODE_LENGTH:
        raise InvalidCurrencyCode(field, "currency codes must be 3 characters")
    return code.upper()


class RateResolver:
    def __init__(
        self,
        cache: RateCache,
        source: RateSource,
        *,
        cache_write_timeout: float = DEFAULT_CACHE_WRITE_TIMEOUT,
    ) -> None:
        self._cache = cache
        self._source = source
        self._cache_write_timeout = cache_write_timeout
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def resolve_rate(self, from_ccy: str, to_ccy: str) -> float:
        from_ccy = normalize_currency(from_ccy, "from")
        to_ccy = normalize_currency(to_ccy, "to")
        if from_ccy == to_ccy:
            return 1.0

        try:
            rate = await self._cache.get(from_ccy, to_ccy)
        except CacheMiss:
            logger.debug("Cache miss for %s->%s", from_ccy, to_ccy)
        except CacheError as exc:
            logger.warning("Cache error for %s->%s (will try API): %s", from_ccy, to_ccy, exc)
        else:
            logger.debug("Cache hit for %s->%s: %s", from_ccy, to_ccy, rate)
            return rate

        try:
            rate = await self._source.fetch_rate(from_ccy, to_ccy)
        except OriginError as exc:
            raise OriginUnavailable(exc) from exc

        self._schedule_cache_write(from_ccy, to_ccy, rate)
        return rate

    def _schedule_cache_write(self, from_ccy: str, to_ccy: str, rate: float) -> None:
        # A fresh task is not cancelled together with the request that spawned it.
        task = asyncio.create_task(
            self._write_cache(from_ccy, to_ccy, rate),
            name=f"cache-write:{from_ccy}:{to_ccy}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_cache(self, from_ccy: str, to_ccy: str, rate: float) -> None:
        try:
            await asyncio.wait_for(
                self._cache.set(from_ccy, to_ccy, rate),
                timeout=self._cache_write_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out caching %s->%s after %.1fs (non-critical)",
                from_ccy,
                to_ccy,
                self._cache_write_timeout,
            )
        except CacheError as exc:
            logger.warning("Failed to cache %s->%s (non-critical): %s", from_ccy, to_ccy, exc)
        else:
            logger.debug("Rate cached for %s->%s: %s", from_ccy, to_ccy, rate)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight cache writes, e.g. before closing the cache."""

        if not self._pending:
            return
        _, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if pending:
            logger.warning("%d cache write(s) still running after drain timeout", len(pending))


__all__ = ["RateResolver", "RateSource", "normalize_currency"]
