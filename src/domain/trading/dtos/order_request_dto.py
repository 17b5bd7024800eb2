from pydantic import BaseModel, Field, field_validator

from src.domain.ledger.dtos.order_dto import OrderDTO, normalize_symbol


class OpenAccountRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class OrderRequest(BaseModel):
    """Body of POST /portfolio/orders."""

    user_id: str = Field(..., min_length=1)
    type: str
    symbol: str = Field(..., min_length=1)
    company_name: str = ""
    shares: float = Field(..., gt=0.0)
    price: float = Field(..., gt=0.0)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return normalize_symbol(v)

    def to_order(self) -> OrderDTO:
        return OrderDTO(
            type=self.type,
            symbol=self.symbol,
            company_name=self.company_name,
            shares=self.shares,
            price_per_share=self.price,
        )
