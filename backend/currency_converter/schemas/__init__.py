"""Pydantic schema exports."""

from .conversion import ConvertResponse, ErrorResponse, HealthResponse

__all__ = ["ConvertResponse", "ErrorResponse", "HealthResponse"]
