"""Currency conversion endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from currency_converter.api.dependencies import get_converter
from currency_converter.schemas import ConvertResponse, ErrorResponse
from currency_converter.services import ConversionBackend

router = APIRouter()


@router.get(
    "/convert",
    response_model=ConvertResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def convert(
    from_ccy: str = Query(..., alias="from", min_length=3, max_length=3, description="Source currency code"),
    to_ccy: str = Query(..., alias="to", min_length=3, max_length=3, description="Target currency code"),
    amount: float = Query(..., ge=0.01, description="Amount in the source currency"),
    converter: ConversionBackend = Depends(get_converter),
) -> ConvertResponse:
    """Convert ``amount`` using the cached or freshly fetched exchange rate."""

    conversion = await converter.convert(from_ccy, to_ccy, amount)
    return ConvertResponse(
        from_currency=conversion.from_currency,
        to_currency=conversion.to_currency,
        amount=conversion.amount,
        rate=conversion.rate,
        result=conversion.result,
    )


__all__ = ["router"]
