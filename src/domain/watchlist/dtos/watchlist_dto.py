from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.ledger.dtos.order_dto import normalize_symbol


class WatchlistItemDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    symbol: str
    company_name: str = ""
    added_at: datetime = Field(default_factory=datetime.now)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return normalize_symbol(v)


class WatchlistItemView(WatchlistItemDTO):
    """Watchlist item enriched with the latest quote, when available."""

    current_price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
