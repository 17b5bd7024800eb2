from pydantic import BaseModel, Field


class AddToWatchlistRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
