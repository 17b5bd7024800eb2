"""
Transaction Database Model

Append-only log of settled orders.
"""

from sqlalchemy import Column, String, Float, DateTime, Enum as SQLEnum
from uuid import uuid4
import enum

from src.infrastructure.database.models.base import BaseModel


class TransactionTypeEnum(str, enum.Enum):
    """Transaction type enum."""
    BUY = "buy"
    SELL = "sell"


class TransactionModel(BaseModel):
    """Transaction database model."""

    __tablename__ = 'transactions'

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, nullable=False, index=True)
    type = Column(SQLEnum(TransactionTypeEnum), nullable=False)
    symbol = Column(String, nullable=False)
    company_name = Column(String, nullable=False, default="")
    shares = Column(Float, nullable=False)
    price_per_share = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
