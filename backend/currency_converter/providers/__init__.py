"""Upstream exchange rate providers."""

from .exchange_rate_api import ExchangeRateAPIClient, LatestRatesPayload

__all__ = ["ExchangeRateAPIClient", "LatestRatesPayload"]
