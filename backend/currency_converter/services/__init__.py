"""Service-layer exports."""

from .conversion import ConversionBackend, ConversionResult, CurrencyConverter
from .rates import RateResolver, RateSource, normalize_currency

__all__ = [
    "ConversionBackend",
    "ConversionResult",
    "CurrencyConverter",
    "RateResolver",
    "RateSource",
    "normalize_currency",
]
