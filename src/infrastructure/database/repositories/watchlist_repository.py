import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.watchlist.dtos.watchlist_dto import WatchlistItemDTO
from src.infrastructure.database.models.watchlist_model import WatchlistItemModel

logger = logging.getLogger(__name__)


class WatchlistRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_by_user(self, user_id: str) -> List[WatchlistItemDTO]:
        stmt = (
            select(WatchlistItemModel)
            .where(WatchlistItemModel.user_id == user_id)
            .order_by(WatchlistItemModel.added_at.asc())
        )
        res = await self.session.execute(stmt)
        return [WatchlistItemDTO.model_validate(m) for m in res.scalars().all()]

    async def exists(self, user_id: str, symbol: str) -> bool:
        stmt = select(WatchlistItemModel.id).where(
            WatchlistItemModel.user_id == user_id,
            WatchlistItemModel.symbol == symbol,
        )
        res = await self.session.execute(stmt)
        return res.scalar_one_or_none() is not None

    async def add(self, item: WatchlistItemDTO) -> bool:
        """
        Add a symbol to the user's watchlist.
        Returns False when the symbol was already present.
        """
        if await self.exists(item.user_id, item.symbol):
            return False

        self.session.add(
            WatchlistItemModel(
                user_id=item.user_id,
                symbol=item.symbol,
                company_name=item.company_name,
                added_at=item.added_at,
            )
        )
        await self.session.flush()
        return True

    async def remove(self, user_id: str, symbol: str) -> int:
        stmt = delete(WatchlistItemModel).where(
            WatchlistItemModel.user_id == user_id,
            WatchlistItemModel.symbol == symbol,
        )
        res = await self.session.execute(stmt)
        return res.rowcount or 0

    async def list_watched_symbols(self) -> List[str]:
        stmt = select(WatchlistItemModel.symbol).distinct()
        res = await self.session.execute(stmt)
        return list(res.scalars().all())
