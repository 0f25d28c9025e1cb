"""Amount conversion on top of the rate resolver."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol

from currency_converter.core.errors import InvalidAmount

from .rates import RateResolver, normalize_currency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    rate: float
    result: float


class ConversionBackend(Protocol):
    """What the HTTP layer needs from a converter."""

    async def convert(self, from_ccy: str, to_ccy: str, amount: float) -> ConversionResult: ...

    async def resolve_rate(self, from_ccy: str, to_ccy: str) -> float: ...


class CurrencyConverter:
    def __init__(self, resolver: RateResolver) -> None:
        self._resolver = resolver

    async def resolve_rate(self, from_ccy: str, to_ccy: str) -> float:
        return await self._resolver.resolve_rate(from_ccy, to_ccy)

    async def convert(self, from_ccy: str, to_ccy: str, amount: float) -> ConversionResult:
        """Convert ``amount`` of ``from_ccy`` into ``to_ccy``.

        No rounding is applied; ``result`` is exactly ``amount * rate``.
        """

        if not math.isfinite(amount) or amount <= 0:
            raise InvalidAmount("amount", f"amount must be positive, got: {amount}")

        rate = await self._resolver.resolve_rate(from_ccy, to_ccy)
        result = amount * rate
        conversion = ConversionResult(
            from_currency=normalize_currency(from_ccy, "from"),
            to_currency=normalize_currency(to_ccy, "to"),
            amount=amount,
            rate=rate,
            result=result,
        )
        logger.info(
            "Currency conversion completed: %s %s -> %s %s (rate %s)",
            amount,
            conversion.from_currency,
            result,
            conversion.to_currency,
            rate,
        )
        return conversion


__all__ = ["ConversionBackend", "ConversionResult", "CurrencyConverter"]
