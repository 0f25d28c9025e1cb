"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from currency_converter.cache import RateCache
from currency_converter.services import ConversionBackend


def get_converter(request: Request) -> ConversionBackend:
    return request.app.state.converter


def get_rate_cache(request: Request) -> RateCache:
    return request.app.state.rate_cache


__all__ = ["get_converter", "get_rate_cache"]
