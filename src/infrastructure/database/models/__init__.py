from .base import Base, BaseModel
from .portfolio_model import PortfolioModel, HoldingModel
from .transaction_model import TransactionModel, TransactionTypeEnum
from .watchlist_model import WatchlistItemModel


__all__ = [
    "Base",
    "BaseModel",
    "PortfolioModel",
    "HoldingModel",
    "TransactionModel",
    "TransactionTypeEnum",
    "WatchlistItemModel",
]
