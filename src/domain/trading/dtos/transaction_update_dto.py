from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.domain.ledger.dtos.order_dto import OrderSide, naive_timestamp, normalize_symbol


class TransactionUpdateDTO(BaseModel):
    """Administrative edit of a stored transaction. Unset fields are kept."""

    type: Optional[OrderSide] = None
    symbol: Optional[str] = None
    company_name: Optional[str] = None
    shares: Optional[float] = Field(default=None, gt=0.0)
    price_per_share: Optional[float] = Field(default=None, gt=0.0)
    timestamp: Optional[datetime] = None

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return normalize_symbol(v)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return naive_timestamp(v)
