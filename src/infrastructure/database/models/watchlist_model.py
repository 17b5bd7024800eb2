"""
Watchlist Database Model
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, UniqueConstraint
from uuid import uuid4

from src.infrastructure.database.models.base import BaseModel


class WatchlistItemModel(BaseModel):
    """Watchlist item database model."""

    __tablename__ = 'watchlist_items'
    __table_args__ = (
        UniqueConstraint("user_id", "symbol"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    symbol = Column(String, nullable=False)
    company_name = Column(String, nullable=False, default="")
    added_at = Column(DateTime, nullable=False, default=datetime.now)
