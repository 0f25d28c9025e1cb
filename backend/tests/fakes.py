"""In-memory collaborators shared by the service and API tests."""

from __future__ import annotations

import asyncio

from currency_converter.core.errors import CacheMiss, CacheUnavailable, OriginError


class InMemoryRateCache:
    def __init__(
        self,
        rates: dict[tuple[str, str], float] | None = None,
        *,
        fail_reads: bool = False,
        fail_writes: bool = False,
        write_delay: float = 0.0,
    ) -> None:
        self.rates = dict(rates or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_delay = write_delay
        self.gets: list[tuple[str, str]] = []
        self.sets: list[tuple[str, str, float]] = []
        self.closed = False

    async def get(self, from_ccy: str, to_ccy: str) -> float:
        self.gets.append((from_ccy, to_ccy))
        if self.fail_reads:
            raise CacheUnavailable("connection refused")
        try:
            return self.rates[(from_ccy, to_ccy)]
        except KeyError:
            raise CacheMiss(f"exchange rate not found for {from_ccy} to {to_ccy}") from None

    async def set(self, from_ccy: str, to_ccy: str, rate: float) -> None:
        if self.write_delay:
            await asyncio.sleep(self.write_delay)
        if self.fail_writes:
            raise CacheUnavailable("connection refused")
        self.sets.append((from_ccy, to_ccy, rate))
        self.rates[(from_ccy, to_ccy)] = rate

    async def delete(self, from_ccy: str, to_ccy: str) -> None:
        self.rates.pop((from_ccy, to_ccy), None)

    async def health_check(self) -> None:
        if self.fail_reads:
            raise CacheUnavailable("connection refused")

    async def close(self) -> None:
        self.closed = True


class StubRateSource:
    def __init__(self, rates: dict[tuple[str, str], float] | None = None, error: OriginError | None = None) -> None:
        self.rates = dict(rates or {})
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def fetch_rate(self, from_ccy: str, to_ccy: str) -> float:
        self.calls.append((from_ccy, to_ccy))
        if self.error is not None:
            raise self.error
        return self.rates[(from_ccy, to_ccy)]
