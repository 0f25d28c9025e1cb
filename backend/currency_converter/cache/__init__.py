"""Exchange rate cache stores."""

from .base import NullRateCache, RateCache, rate_key
from .redis_store import RedisRateCache

__all__ = ["NullRateCache", "RateCache", "RedisRateCache", "rate_key"]
