"""Cache store contract shared by the resolver and the health probe."""

from __future__ import annotations

from typing import Protocol

from currency_converter.core.errors import CacheMiss, CacheUnavailable


def rate_key(from_ccy: str, to_ccy: str) -> str:
    """Return the directional cache key for a currency pair."""

    return f"rate:{from_ccy}:{to_ccy}"


class RateCache(Protocol):
    async def get(self, from_ccy: str, to_ccy: str) -> float: ...

    async def set(self, from_ccy: str, to_ccy: str, rate: float) -> None: ...

    async def delete(self, from_ccy: str, to_ccy: str) -> None: ...

    async def health_check(self) -> None: ...

    async def close(self) -> None: ...


class NullRateCache:
    """Stand-in used when the cache store is unreachable at startup.

    Every lookup is a miss and writes are dropped, so conversions always go to
    the rate API.
    """

    async def get(self, from_ccy: str, to_ccy: str) -> float:
        raise CacheMiss(f"exchange rate not found for {from_ccy} to {to_ccy}")

    async def set(self, from_ccy: str, to_ccy: str, rate: float) -> None:
        return None

    async def delete(self, from_ccy: str, to_ccy: str) -> None:
        return None

    async def health_check(self) -> None:
        raise CacheUnavailable("cache store is not connected")

    async def close(self) -> None:
        return None


__all__ = ["NullRateCache", "RateCache", "rate_key"]
