from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class HoldingView(BaseModel):
    """A holding plus the fields derived from a quote."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    company_name: str = ""
    shares: float
    avg_cost: float
    cost_basis: float
    current_price: Optional[float] = None
    market_value: Optional[float] = None
    unrealized_gain: Optional[float] = None
    unrealized_gain_percent: Optional[float] = None
    # derived fields carried over from an earlier valuation
    stale: bool = False

    @property
    def is_valued(self) -> bool:
        return self.market_value is not None


class PortfolioView(BaseModel):
    """Display-ready valuation of a portfolio. Never persisted."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    cash_balance: float
    holdings: List[HoldingView]
    total_value: float
    total_gain_loss: float
    total_gain_loss_percent: float

    def holding(self, symbol: str) -> Optional[HoldingView]:
        for h in self.holdings:
            if h.symbol == symbol:
                return h
        return None
