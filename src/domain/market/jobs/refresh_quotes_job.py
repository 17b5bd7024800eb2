import logging
from datetime import datetime

from src.domain.market.market_data_service import MarketDataService
from src.domain.trading.trading_service import TradingService
from src.domain.watchlist.watchlist_service import WatchlistService


logger = logging.getLogger(__name__)


class RefreshQuotesJob:
    """Keeps the quote cache warm for every held or watched symbol."""

    def __init__(
        self,
        market_data: MarketDataService,
        trading: TradingService,
        watchlist: WatchlistService,
    ) -> None:
        self.market_data = market_data
        self.trading = trading
        self.watchlist = watchlist

    async def run(self) -> None:
        logger.info("Starting RefreshQuotesJob at %s",
                    datetime.now().isoformat())

        symbols = set(await self.trading.list_held_symbols())
        symbols.update(await self.watchlist.list_watched_symbols())

        if not symbols:
            logger.info("No held or watched symbols, nothing to refresh")
            return

        quotes = await self.market_data.refresh(symbols)

        logger.info("Finished RefreshQuotesJob: %d/%d symbols refreshed",
                    len(quotes), len(symbols))
