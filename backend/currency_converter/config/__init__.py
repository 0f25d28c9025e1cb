"""Configuration package for the currency converter service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
