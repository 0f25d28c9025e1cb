from pydantic import BaseModel, Field


class ConvertResponse(BaseModel):
    from_currency: str = Field(..., alias="from", examples=["USD"])
    to_currency: str = Field(..., alias="to", examples=["EUR"])
    amount: float
    rate: float
    result: float

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    cache: str


__all__ = ["ConvertResponse", "ErrorResponse", "HealthResponse"]
