import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models.portfolio_model import (
    HoldingModel,
    PortfolioModel,
)
from src.domain.ledger.dtos.portfolio_dto import HoldingDTO, PortfolioDTO

logger = logging.getLogger(__name__)


class PortfolioRepository:
    """
    Persistence of portfolios and their holdings.

    Writes are flushed, never committed: the caller's transaction decides.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_model(
        self,
        user_id: str,
        for_update: bool = False,
    ) -> Optional[PortfolioModel]:
        stmt = select(PortfolioModel).where(PortfolioModel.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        res = await self.session.execute(stmt)
        return res.scalar_one_or_none()

    async def load(self, user_id: str) -> Optional[PortfolioDTO]:
        model = await self.get_model(user_id)
        if model is None:
            return None
        return self.to_dto(model)

    async def create(self, user_id: str, initial_balance: float) -> PortfolioDTO:
        """
        Create an empty portfolio holding only the initial cash.
        """
        model = PortfolioModel(
            user_id=user_id,
            cash_balance=initial_balance,
            initial_balance=initial_balance,
            holdings=[],
        )

        self.session.add(model)
        await self.session.flush()

        logger.info(
            f"💰 Portfolio created for user={user_id} with cash={initial_balance:.2f}"
        )
        return self.to_dto(model)

    async def save(self, model: PortfolioModel, dto: PortfolioDTO) -> PortfolioDTO:
        """
        Write a settled portfolio state onto its loaded row.

        Holdings are synced by symbol: missing ones are deleted, existing
        ones updated in place, new ones inserted.
        """
        model.cash_balance = dto.cash_balance
        model.updated_at = datetime.now()

        by_symbol = {h.symbol: h for h in model.holdings}

        for symbol, row in by_symbol.items():
            if symbol not in dto.holdings:
                model.holdings.remove(row)

        for symbol, holding in dto.holdings.items():
            row = by_symbol.get(symbol)
            if row is None:
                model.holdings.append(
                    HoldingModel(
                        user_id=model.user_id,
                        symbol=holding.symbol,
                        company_name=holding.company_name,
                        shares=holding.shares,
                        avg_cost=holding.avg_cost,
                    )
                )
            else:
                row.shares = holding.shares
                row.avg_cost = holding.avg_cost
                row.company_name = holding.company_name

        await self.session.flush()
        return self.to_dto(model)

    async def list_held_symbols(self) -> List[str]:
        stmt = select(HoldingModel.symbol).distinct()
        res = await self.session.execute(stmt)
        return list(res.scalars().all())

    @staticmethod
    def to_dto(model: PortfolioModel) -> PortfolioDTO:
        return PortfolioDTO(
            user_id=model.user_id,
            cash_balance=model.cash_balance,
            initial_balance=model.initial_balance,
            holdings={
                h.symbol: HoldingDTO.model_validate(h)
                for h in model.holdings
            },
            version=model.version or 1,
        )
