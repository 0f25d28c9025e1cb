"""ExchangeRate-API client tests."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from currency_converter.core.errors import (
    CurrencyNotSupported,
    OriginAPIError,
    OriginDecodeError,
    OriginHTTPError,
    OriginNetworkError,
    OriginTimeout,
)
from currency_converter.providers import ExchangeRateAPIClient
from currency_converter.services import RateResolver
from tests.fakes import InMemoryRateCache

API_KEY = "secret-test-key"
SUCCESS_PAYLOAD = {
    "result": "success",
    "base_code": "USD",
    "conversion_rates": {"USD": 1, "EUR": 0.9, "GBP": 0.79},
}


def _client(handler) -> tuple[ExchangeRateAPIClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    transport = httpx.MockTransport(_record)
    client = ExchangeRateAPIClient(
        API_KEY,
        base_url="https://rates.test/",
        timeout=1.0,
        client=httpx.AsyncClient(transport=transport),
    )
    return client, seen


async def test_fetch_rate_reads_target_from_base_table():
    client, seen = _client(lambda request: httpx.Response(200, json=SUCCESS_PAYLOAD))

    rate = await client.fetch_rate("USD", "EUR")
    await client.aclose()

    assert rate == 0.9
    assert str(seen[0].url) == f"https://rates.test/v6/{API_KEY}/latest/USD"


async def test_latest_returns_full_table():
    client, _ = _client(lambda request: httpx.Response(200, json=SUCCESS_PAYLOAD))

    payload = await client.latest("USD")

    assert payload.base_code == "USD"
    assert set(payload.conversion_rates) == {"USD", "EUR", "GBP"}


async def test_non_success_status_raises_http_error():
    client, _ = _client(lambda request: httpx.Response(503, text="upstream maintenance"))

    with pytest.raises(OriginHTTPError) as excinfo:
        await client.fetch_rate("USD", "EUR")

    assert excinfo.value.status_code == 503
    assert excinfo.value.body == "upstream maintenance"


async def test_malformed_json_raises_decode_error():
    client, _ = _client(lambda request: httpx.Response(200, text="<html>not json</html>"))

    with pytest.raises(OriginDecodeError):
        await client.fetch_rate("USD", "EUR")


async def test_unexpected_shape_raises_decode_error():
    client, _ = _client(lambda request: httpx.Response(200, json=["success"]))

    with pytest.raises(OriginDecodeError):
        await client.fetch_rate("USD", "EUR")


async def test_error_envelope_raises_api_error_with_reason():
    client, _ = _client(
        lambda request: httpx.Response(200, json={"result": "error", "error-type": "invalid-key"})
    )

    with pytest.raises(OriginAPIError) as excinfo:
        await client.fetch_rate("USD", "EUR")

    assert excinfo.value.reason == "invalid-key"


async def test_missing_target_currency_lists_available_codes():
    client, _ = _client(lambda request: httpx.Response(200, json=SUCCESS_PAYLOAD))

    with pytest.raises(CurrencyNotSupported) as excinfo:
        await client.fetch_rate("USD", "XYZ")

    assert excinfo.value.currency == "XYZ"
    assert excinfo.value.available == ["EUR", "GBP", "USD"]


async def test_timeout_is_distinguished_from_network_failure():
    def _timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = _client(_timeout)

    with pytest.raises(OriginTimeout):
        await client.fetch_rate("USD", "EUR")


async def test_network_failure_never_leaks_api_key(caplog):
    def _refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"connection refused for {request.url}", request=request)

    client, _ = _client(_refused)

    with caplog.at_level(logging.DEBUG, logger="currency_converter.providers.exchange_rate_api"):
        with pytest.raises(OriginNetworkError) as excinfo:
            await client.fetch_rate("USD", "EUR")

    assert API_KEY not in str(excinfo.value)
    assert API_KEY not in caplog.text
    for record in caplog.records:
        assert API_KEY not in str(getattr(record, "url", ""))


def _stalled_client(started: asyncio.Event) -> ExchangeRateAPIClient:
    async def _stall(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json=SUCCESS_PAYLOAD)

    return ExchangeRateAPIClient(
        API_KEY,
        base_url="https://rates.test/",
        timeout=30.0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(_stall)),
    )


async def test_caller_cancellation_propagates_unchanged(caplog):
    started = asyncio.Event()
    client = _stalled_client(started)

    with caplog.at_level(logging.WARNING, logger="currency_converter.providers.exchange_rate_api"):
        task = asyncio.create_task(client.fetch_rate("USD", "EUR"))
        await asyncio.wait_for(started.wait(), timeout=1.0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
    await client.aclose()

    assert "canceled by caller" in caplog.text


async def test_cancelled_lookup_schedules_no_cache_write():
    started = asyncio.Event()
    client = _stalled_client(started)
    cache = InMemoryRateCache()
    resolver = RateResolver(cache, client)

    task = asyncio.create_task(resolver.resolve_rate("USD", "EUR"))
    await asyncio.wait_for(started.wait(), timeout=1.0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await client.aclose()

    assert resolver.pending_writes == 0
    assert cache.sets == []
