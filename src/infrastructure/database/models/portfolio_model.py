"""
Portfolio Database Models

One portfolio row per user plus its holdings. ``cash_balance`` is the
only stored cash figure.
"""

from sqlalchemy import Column, String, Float, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from uuid import uuid4

from src.infrastructure.database.models.base import BaseModel


class PortfolioModel(BaseModel):
    """Portfolio database model."""
    __tablename__ = 'portfolios'

    user_id = Column(String, primary_key=True)
    cash_balance = Column(Float, nullable=False)
    initial_balance = Column(Float, nullable=False)
    version = Column(Integer, nullable=False)

    holdings = relationship(
        "HoldingModel",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="HoldingModel.symbol",
    )

    # optimistic concurrency: UPDATE ... WHERE version = :loaded_version
    __mapper_args__ = {"version_id_col": version}


class HoldingModel(BaseModel):
    """Holding database model. Rows with zero shares are deleted."""
    __tablename__ = 'holdings'
    __table_args__ = (
        UniqueConstraint("user_id", "symbol"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(
        String,
        ForeignKey("portfolios.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    symbol = Column(String, nullable=False)
    company_name = Column(String, nullable=False, default="")
    shares = Column(Float, nullable=False)
    avg_cost = Column(Float, nullable=False)

    portfolio = relationship("PortfolioModel", back_populates="holdings")
