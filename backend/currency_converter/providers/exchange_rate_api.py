"""ExchangeRate-API client used as the source of truth for rates."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from currency_converter.config import AppSettings
from currency_converter.config.settings import DEFAULT_CURRENCY_API_URL
from currency_converter.core.errors import (
    CurrencyNotSupported,
    OriginAPIError,
    OriginDecodeError,
    OriginHTTPError,
    OriginNetworkError,
    OriginTimeout,
)

logger = logging.getLogger(__name__)

_BODY_SNIPPET_LIMIT = 200


class LatestRatesPayload(BaseModel):
    """Envelope returned by ``/v6/{key}/latest/{base}``."""

    result: str
    base_code: str | None = None
    conversion_rates: dict[str, float] = Field(default_factory=dict)
    error_type: str | None = Field(default=None, alias="error-type")


class ExchangeRateAPIClient:
    """Thin async client around the ExchangeRate-API ``latest`` endpoint.

    One request per call, no retries. The transport is shared and safe for
    concurrent use; cancellation of the calling task aborts the request.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_CURRENCY_API_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_settings(cls, settings: AppSettings, client: httpx.AsyncClient | None = None) -> "ExchangeRateAPIClient":
        return cls(
            settings.currency_api_key,
            base_url=settings.currency_api_url,
            timeout=settings.api_timeout_seconds,
            client=client,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _url(self, base: str) -> str:
        return f"{self._base_url}/v6/{self._api_key}/latest/{base}"

    def _mask(self, text: str) -> str:
        if not self._api_key:
            return text
        return text.replace(self._api_key, "***")

    async def latest(self, base: str) -> LatestRatesPayload:
        """Return the full conversion table for ``base``."""

        url = self._url(base)
        logger.debug("Fetching rates from ExchangeRate-API", extra={"base": base, "url": self._mask(url)})
        try:
            response = await self._client.get(url, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            logger.error("Rate API request timeout after %.1fs (base=%s)", self._timeout, base)
            raise OriginTimeout(f"Rate API request timeout after {self._timeout}s") from exc
        except asyncio.CancelledError:
            logger.warning("Rate API request canceled by caller (base=%s)", base)
            raise
        except httpx.RequestError as exc:
            reason = self._mask(str(exc)) or type(exc).__name__
            logger.error("Rate API request failed (base=%s): %s", base, reason)
            raise OriginNetworkError(f"Rate API request failed: {reason}") from exc

        if not response.is_success:
            snippet = self._mask(response.text[:_BODY_SNIPPET_LIMIT])
            logger.error(
                "Rate API returned error status %d (base=%s)",
                response.status_code,
                base,
                extra={"response": snippet},
            )
            raise OriginHTTPError(response.status_code, snippet)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            logger.error("Invalid JSON from ExchangeRate-API (base=%s)", base)
            raise OriginDecodeError(f"invalid JSON response: {exc}") from exc
        try:
            parsed = LatestRatesPayload.model_validate(payload)
        except ValidationError as exc:
            logger.error("Unexpected payload shape from ExchangeRate-API (base=%s)", base)
            raise OriginDecodeError(f"unexpected response shape: {exc.error_count()} error(s)") from exc

        if parsed.result != "success":
            reason = parsed.error_type or parsed.result
            logger.error("ExchangeRate-API returned error (base=%s): %s", base, reason)
            raise OriginAPIError(reason)
        return parsed

    async def fetch_rate(self, from_ccy: str, to_ccy: str) -> float:
        """Return how many ``to_ccy`` one unit of ``from_ccy`` buys."""

        payload = await self.latest(from_ccy)
        try:
            rate = payload.conversion_rates[to_ccy]
        except KeyError:
            available = list(payload.conversion_rates)
            logger.error(
                "Currency %s not found in ExchangeRate-API response (base=%s)",
                to_ccy,
                from_ccy,
                extra={"available_currencies": sorted(available)},
            )
            raise CurrencyNotSupported(to_ccy, available) from None
        logger.debug("Rate fetched from ExchangeRate-API: %s->%s = %s", from_ccy, to_ccy, rate)
        return rate


__all__ = ["ExchangeRateAPIClient", "LatestRatesPayload"]
