from __future__ import annotations
import logging

from src.domain.ledger.dtos.valuation_dto import PortfolioView
from src.domain.ledger.valuation_engine import valuate
from src.domain.market.market_data_service import MarketDataService
from src.domain.portfolio.valuation_cache import ValuationCache
from src.domain.trading.trading_service import TradingService

logger = logging.getLogger(__name__)


class PortfolioService:
    """Read side: stored portfolio + fresh quotes -> PortfolioView."""

    def __init__(
        self,
        trading: TradingService,
        market_data: MarketDataService,
        views: ValuationCache,
    ):
        self.trading = trading
        self.market_data = market_data
        self.views = views

    async def get_portfolio_view(self, user_id: str) -> PortfolioView:
        portfolio = await self.trading.get_portfolio(user_id)

        quotes = await self.market_data.get_quotes(portfolio.holdings.keys())

        missing = sorted(set(portfolio.holdings) - set(quotes))
        if missing:
            logger.warning(
                f"Valuating portfolio of user={user_id} without quotes for {missing}"
            )

        view = valuate(portfolio, quotes, previous=self.views.get(user_id))
        self.views.put(view)
        return view
