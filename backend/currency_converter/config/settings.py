"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_CURRENCY_API_URL = "https://v6.exchangerate-api.com"


class AppSettings(BaseSettings):
    """Configuration options for the currency converter service."""

    app_name: str = Field(default="Currency Converter API")
    service_name: str = Field(default="currency-converter-api")
    version: str = Field(default="2.0.0")
    api_prefix: str = Field(default="/api/v1")

    log_level: Literal["debug", "info", "warning", "error"] = Field(default="info")
    log_format: Literal["text", "json"] = Field(default="json")

    redis_addr: str = Field(default="localhost:6379", description="Redis host:port.")
    redis_password: str | None = Field(default=None)
    redis_db: int = Field(default=0, ge=0)
    redis_ttl_seconds: int = Field(default=1800, gt=0, description="Lifetime of cached rates.")
    redis_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Upper bound for a single Redis command.",
    )
    cache_write_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Deadline for the background write that populates the cache.",
    )

    currency_api_url: str = Field(default=DEFAULT_CURRENCY_API_URL)
    currency_api_key: str = Field(default="", description="ExchangeRate-API key.")
    api_timeout_seconds: float = Field(default=10.0, gt=0)

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="currency-converter")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def redis_host(self) -> str:
        host, _, _ = self.redis_addr.rpartition(":")
        return host or self.redis_addr

    @property
    def redis_port(self) -> int:
        _, sep, port = self.redis_addr.rpartition(":")
        return int(port) if sep and port.isdigit() else 6379

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"currency_api_key", "redis_password"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_CURRENCY_API_URL",
    "get_settings",
]
