"""Exception taxonomy and FastAPI error handlers."""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_FAILURE_DETAIL = "Unable to resolve exchange rate, please try again later."


class ConverterError(RuntimeError):
    """Base class for every error raised by the converter."""


# Local validation


class ValidationFailure(ConverterError):
    """Raised when caller input is rejected before any network access."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class InvalidCurrencyCode(ValidationFailure):
    pass


class InvalidAmount(ValidationFailure):
    pass


# Cache layer (always absorbed by the resolver)


class CacheError(ConverterError):
    """Raised by cache stores; never fatal to a conversion."""


class CacheMiss(CacheError):
    """The requested pair has no cached rate."""


class CacheUnavailable(CacheError):
    """The cache store could not be reached or timed out."""


# Origin layer (always fatal to the resolution)


class OriginError(ConverterError):
    """Raised when the upstream exchange-rate API cannot supply a rate."""


class OriginTimeout(OriginError):
    pass


class OriginNetworkError(OriginError):
    pass


class OriginHTTPError(OriginError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Rate API returned status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class OriginDecodeError(OriginError):
    pass


class OriginAPIError(OriginError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Rate API error: {reason}")
        self.reason = reason


class CurrencyNotSupported(OriginError):
    def __init__(self, currency: str, available: Iterable[str] = ()) -> None:
        super().__init__(f"Currency {currency} not found in rate API response")
        self.currency = currency
        self.available = sorted(available)


class OriginUnavailable(ConverterError):
    """Resolver-level failure wrapping the provider error that caused it."""

    def __init__(self, cause: OriginError) -> None:
        super().__init__(f"Failed to get rate from API: {cause}")
        self.cause = cause


def _error_body(error: str, details: str) -> dict[str, str]:
    return {"error": error, "details": details}


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()) if item != "query")
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "invalid request"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request", _describe_validation_errors(exc)),
    )


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request", f"{exc.field}: {exc}"),
    )


async def origin_unavailable_handler(request: Request, exc: OriginUnavailable) -> JSONResponse:
    logger.error(
        "Conversion failed for %s: %s",
        request.url.path,
        exc,
        extra={"cause": type(exc.cause).__name__},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Conversion failed", GENERIC_FAILURE_DETAIL),
    )


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal Server Error", "Something went wrong"),
    )


__all__ = [
    "CacheError",
    "CacheMiss",
    "CacheUnavailable",
    "ConverterError",
    "CurrencyNotSupported",
    "GENERIC_FAILURE_DETAIL",
    "InvalidAmount",
    "InvalidCurrencyCode",
    "OriginAPIError",
    "OriginDecodeError",
    "OriginError",
    "OriginHTTPError",
    "OriginNetworkError",
    "OriginTimeout",
    "OriginUnavailable",
    "ValidationFailure",
    "origin_unavailable_handler",
    "request_validation_handler",
    "server_error_handler",
    "validation_failure_handler",
]
