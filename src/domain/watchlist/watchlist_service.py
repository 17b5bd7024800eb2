import logging
from typing import List

from src.domain.market.market_data_service import MarketDataService
from src.domain.watchlist.dtos.watchlist_dto import WatchlistItemDTO, WatchlistItemView
from src.infrastructure.database.client import DatabaseClient
from src.infrastructure.database.repositories.watchlist_repository import WatchlistRepository

logger = logging.getLogger(__name__)


class WatchlistService:
    def __init__(self, db_client: DatabaseClient, market_data: MarketDataService):
        self.db_client = db_client
        self.market_data = market_data

    async def list(self, user_id: str) -> List[WatchlistItemView]:
        """
        Watchlist items with their latest quote. Items whose quote lookup
        failed are returned without price fields.
        """
        async with self.db_client.get_session() as session:
            items = await WatchlistRepository(session).list_by_user(user_id)

        quotes = await self.market_data.get_quotes(i.symbol for i in items)

        views: List[WatchlistItemView] = []
        for item in items:
            quote = quotes.get(item.symbol)
            extra = {}
            if quote is not None:
                extra = {
                    "current_price": quote.price,
                    "change": quote.change,
                    "change_percent": quote.change_percent,
                }
            views.append(WatchlistItemView(**item.model_dump(), **extra))
        return views

    async def add(self, user_id: str, symbol: str, company_name: str) -> WatchlistItemDTO:
        item = WatchlistItemDTO(
            user_id=user_id,
            symbol=symbol,
            company_name=company_name,
        )
        async with self.db_client.transaction() as session:
            added = await WatchlistRepository(session).add(item)

        if added:
            logger.info(f"⭐ {item.symbol} added to watchlist of user={user_id}")
        return item

    async def remove(self, user_id: str, symbol: str) -> bool:
        async with self.db_client.transaction() as session:
            removed = await WatchlistRepository(session).remove(
                user_id, symbol.strip().upper()
            )

        if removed:
            logger.info(f"{symbol} removed from watchlist of user={user_id}")
        return bool(removed)

    async def list_watched_symbols(self) -> List[str]:
        async with self.db_client.get_session() as session:
            return await WatchlistRepository(session).list_watched_symbols()
