"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .convert import router as convert_router

api_router = APIRouter()
api_router.include_router(convert_router, tags=["currency"])

__all__ = ["api_router"]
