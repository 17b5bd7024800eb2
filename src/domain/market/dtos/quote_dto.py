from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChartInterval(str, Enum):
    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"


class QuoteDTO(BaseModel):
    """Point-in-time price snapshot for a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    company_name: str = ""
    price: float = Field(..., gt=0.0)
    change: float = 0.0
    change_percent: float = 0.0
    volume: float = 0.0
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class ChartPointDTO(BaseModel):
    timestamp: datetime
    date: str
    price: float


class StockSearchResultDTO(BaseModel):
    symbol: str
    name: str
    type: str = ""
    region: str = ""
