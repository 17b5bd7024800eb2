from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HoldingDTO(BaseModel):
    """One open position. Zero-share holdings cannot exist."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    symbol: str
    company_name: str = ""
    shares: float = Field(..., gt=0.0)
    avg_cost: float = Field(..., ge=0.0)

    @property
    def cost_basis(self) -> float:
        return self.avg_cost * self.shares


class PortfolioDTO(BaseModel):
    """
    Canonical portfolio record. ``cash_balance`` is the only cash figure.
    Holdings are keyed by symbol.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    cash_balance: float = Field(..., ge=0.0)
    initial_balance: float = Field(..., ge=0.0)
    holdings: Dict[str, HoldingDTO] = Field(default_factory=dict)
    version: int = 1

    @field_validator("holdings")
    @classmethod
    def validate_holding_keys(cls, v: Dict[str, HoldingDTO]) -> Dict[str, HoldingDTO]:
        for symbol, holding in v.items():
            if symbol != holding.symbol:
                raise ValueError(
                    f"Holding keyed as {symbol} carries symbol {holding.symbol}")
        return v

    @property
    def cost_basis(self) -> float:
        return sum((h.cost_basis for h in self.holdings.values()), 0.0)
