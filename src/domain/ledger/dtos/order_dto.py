from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.ledger.dtos.portfolio_dto import PortfolioDTO


class OrderSide(str, Enum):
    """Order side."""
    BUY = "buy"
    SELL = "sell"


def normalize_symbol(v: str) -> str:
    symbol = (v or "").strip().upper()
    if not symbol:
        raise ValueError("symbol cannot be empty")
    return symbol


def naive_timestamp(v: datetime) -> datetime:
    """Aware datetimes are converted to naive local time, as stored."""
    if v.tzinfo is not None:
        return v.astimezone().replace(tzinfo=None)
    return v


class OrderDTO(BaseModel):
    """
    Market order submitted by a user. Executes immediately at
    ``price_per_share``.

    ``type`` is kept as plain text; the ledger engine decides whether it is
    a valid side.
    """

    type: str
    symbol: str
    company_name: str = ""
    shares: float = Field(..., gt=0.0)
    price_per_share: float = Field(..., gt=0.0)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return normalize_symbol(v)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().lower()


class TransactionDTO(BaseModel):
    """Immutable record of a settled order."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    type: OrderSide
    symbol: str
    company_name: str = ""
    shares: float = Field(..., gt=0.0)
    price_per_share: float = Field(..., gt=0.0)
    total_amount: float = Field(..., gt=0.0)
    timestamp: datetime = Field(default_factory=datetime.now)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return normalize_symbol(v)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        return naive_timestamp(v)

    def to_order(self) -> OrderDTO:
        return OrderDTO(
            type=self.type.value,
            symbol=self.symbol,
            company_name=self.company_name,
            shares=self.shares,
            price_per_share=self.price_per_share,
        )


class SettlementDTO(BaseModel):
    """Result of a successfully executed order."""

    model_config = ConfigDict(frozen=True)

    portfolio: PortfolioDTO
    transaction: TransactionDTO
